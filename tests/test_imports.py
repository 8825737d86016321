"""
Verify package structure and module imports.
Ensures that the application modules can be imported without syntax errors,
confirming correct package setup and path configuration.
"""

def test_package_imports():
    """Assert that every module can be imported without syntax errors."""
    try:
        import vdv301_test_client.config_loader
        import vdv301_test_client.main
        import vdv301_test_client.models
        import vdv301_test_client.mqtt
        import vdv301_test_client.sequence
        import vdv301_test_client.topics
        success = True
    except ImportError as e:
        success = False
        print(f"Import Failed: {e}")

    assert success is True
