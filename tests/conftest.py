"""
Pytest Configuration and Fixtures for the vdv301_test_client project.
"""

import socket
import sys
import logging

import pytest

from vdv301_test_client.topics import BROKER_HOST, BROKER_PORT

@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """
    Configures the Python logging framework globally for all tests.
    Because tests bypass main.py, this ensures our logs are formatted
    and visible during test runs.
    """
    formatter = logging.Formatter(fmt="%(levelname)-8s %(message)s - %(funcName)s:%(lineno)d ")
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    yield
    logger.removeHandler(handler)

@pytest.fixture
def require_broker():
    """Skips the test unless an MQTT broker is listening on the fixed endpoint."""
    try:
        with socket.create_connection((BROKER_HOST, BROKER_PORT), timeout=0.5):
            pass
    except OSError:
        pytest.skip(f"No MQTT broker reachable at {BROKER_HOST}:{BROKER_PORT}")
