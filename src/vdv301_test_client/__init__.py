"""
vdv301_test_client

A manual integration-test client that exercises a VDV-301 style
transit operations message exchange over an MQTT broker. It publishes
a fixed script of XML requests and prints every response it receives.
"""
__version__ = "0.1.0"
