"""
Broker endpoint and topic names.

These are fixed for the test client. Nothing here is read from config.yaml.
"""
from typing import Tuple

BROKER_HOST = "localhost"
BROKER_PORT = 1883

# --- Requests (client -> backend) ---
TECHNICAL_LOGIN_TOPIC = "vdv/test/technical_login"
TECHNICAL_LOGOUT_TOPIC = "vdv/test/technical_logout"
LOGIN_TOPIC = "vdv/test/login"
LOGOUT_TOPIC = "vdv/test/logout"
OPERATIONAL_LOGIN_TOPIC = "vdv/test/operational_login"
OPERATIONAL_LOGOUT_TOPIC = "vdv/test/operational_logout"
PREDEFINED_MESSAGE_TOPIC = "vdv/test/predefined_message"
GNSS_POSITION_TOPIC = (
    "IoM/1.0/DataVersion/1.0/Country/DE/BE/Organisation/MVG/100"
    "/Vehicle/BUS/1234/PhysicalPosition/GnssPhysicalPositionData"
)
ANNOUNCEMENT_TOPIC = "vdv/test/announcement"
NOTIFICATION_TOPIC = "vdv/test/notification"
DISTRESS_TOPIC = "vdv/test/distress"

# --- Responses (backend -> client) ---
RESPONSE_SUFFIX = "/response"


def response_topic(request_topic: str) -> str:
    """Returns the response topic paired with a request topic."""
    return request_topic + RESPONSE_SUFFIX


RESPONSE_TOPICS: Tuple[str, ...] = tuple(
    response_topic(topic) for topic in (
        LOGIN_TOPIC,
        LOGOUT_TOPIC,
        OPERATIONAL_LOGIN_TOPIC,
        OPERATIONAL_LOGOUT_TOPIC,
        PREDEFINED_MESSAGE_TOPIC,
        TECHNICAL_LOGIN_TOPIC,
        TECHNICAL_LOGOUT_TOPIC,
    )
)
