"""
The Scripted Test Sequence.

This module is responsible for:
- Holding the parameter values the requests are built from (`RequestFixtures`).
- Defining the fixed order in which requests are sent (`build_test_sequence`).
- Publishing that script step by step with a pause in between (`run_sequence`).

The order and the delays are a test script, not a protocol requirement.
"""
import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from vdv301_test_client import topics
from vdv301_test_client.models import (
    BaseRequest,
    DistressCallRequest,
    GnssPhysicalPositionRequest,
    LiveAnnouncementRequest,
    LogOffRequest,
    LogOnRequest,
    MQTTMessage,
    NotificationResponse,
    OperationalLogOffRequest,
    OperationalLogOnRequest,
    PredefinedMessageRequest,
    TechnicalLogOffRequest,
    TechnicalLogOnRequest,
)

logger = logging.getLogger(__name__)

PublishCallback = Callable[[MQTTMessage], Awaitable[None]]


@dataclass(frozen=True)
class RequestFixtures:
    """The parameter values every request in the script is built from."""
    # Technical and driver log-on
    vehicle_ref: str = "de:mvg:5812"
    obu_id: str = "obu-123"
    base_version: str = "2025-08-14.1"
    driver_ref: str = "de:mvg:abc"

    # Operational log-on
    operational_vehicle_ref: str = "de:mvg:1234"
    vehicle_journey_ref: str = "vehicleJourney:12345"
    operating_day_ref: str = "operatingDay:67890"
    block_ref: str = "block:54321"
    journey_pattern_ref: str = "de:mvg:12345"

    # Driver code "10" is a traffic jam
    message_code: str = "10"
    message_description: str = "Traffic Jam - 10 min delay"

    # GNSS
    publisher_id: str = "publisher-001"
    longitude: float = 2.356
    latitude: float = 56.356
    altitude: float = 100
    precision: float = 10
    visible_satellites: int = 8
    compass_bearing: float = 90
    velocity: float = 12.5

    announcement_id: str = "123"
    announcement_url: str = "https://url_to_audio_file"
    notification_id: str = "123"
    notification_description: str = "Experiencing delay due to traffic"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RequestFixtures":
        """
        Builds the fixtures from the optional `fixtures` mapping in config.yaml.
        Unknown keys are logged and ignored, anything but a mapping is a ValueError.
        """
        overrides = config.get('fixtures') or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"'fixtures' in config must be a mapping, got {type(overrides).__name__}")

        known = {f.name for f in dataclasses.fields(cls)}

        for key in sorted(set(overrides) - known):
            logger.warning(f"Ignoring unknown fixture '{key}' in config.")

        return cls(**{key: value for key, value in overrides.items() if key in known})


@dataclass(frozen=True)
class RequestStep:
    """One line of the test script: what to send and where."""
    label: str
    topic: str
    request: BaseRequest

    def to_message(self, qos: int = 1) -> MQTTMessage:
        """Renders the request (fresh MessageId and timestamp) into an envelope."""
        return MQTTMessage(topic=self.topic, payload=self.request.to_bytes(), qos=qos)


def build_test_sequence(fixtures: RequestFixtures) -> List[RequestStep]:
    """Returns the request script in the order it is published."""
    operational_refs = dict(
        vehicle_ref=fixtures.operational_vehicle_ref,
        vehicle_journey_ref=fixtures.vehicle_journey_ref,
        operating_day_ref=fixtures.operating_day_ref,
        block_ref=fixtures.block_ref,
        journey_pattern_ref=fixtures.journey_pattern_ref,
    )

    return [
        RequestStep(
            "Technical LogOn Request",
            topics.TECHNICAL_LOGIN_TOPIC,
            TechnicalLogOnRequest(
                vehicle_ref=fixtures.vehicle_ref,
                obu_id=fixtures.obu_id,
                base_version=fixtures.base_version,
            ),
        ),
        RequestStep(
            "Technical LogOff Request",
            topics.TECHNICAL_LOGOUT_TOPIC,
            TechnicalLogOffRequest(vehicle_ref=fixtures.vehicle_ref),
        ),
        RequestStep(
            "LogOn Request",
            topics.LOGIN_TOPIC,
            LogOnRequest(vehicle_ref=fixtures.vehicle_ref, driver_ref=fixtures.driver_ref),
        ),
        RequestStep(
            "LogOff Request",
            topics.LOGOUT_TOPIC,
            LogOffRequest(vehicle_ref=fixtures.vehicle_ref, driver_ref=fixtures.driver_ref),
        ),
        RequestStep(
            "Operational LogOn Request",
            topics.OPERATIONAL_LOGIN_TOPIC,
            OperationalLogOnRequest(**operational_refs),
        ),
        RequestStep(
            "Operational LogOff Request",
            topics.OPERATIONAL_LOGOUT_TOPIC,
            OperationalLogOffRequest(**operational_refs),
        ),
        RequestStep(
            "Predefined Message Request",
            topics.PREDEFINED_MESSAGE_TOPIC,
            PredefinedMessageRequest(
                message_code=fixtures.message_code,
                description=fixtures.message_description,
            ),
        ),
        RequestStep(
            "GnssPhysicalPosition Request",
            topics.GNSS_POSITION_TOPIC,
            GnssPhysicalPositionRequest(
                publisher_id=fixtures.publisher_id,
                longitude=fixtures.longitude,
                latitude=fixtures.latitude,
                altitude=fixtures.altitude,
                precision=fixtures.precision,
                visible_satellites=fixtures.visible_satellites,
                compass_bearing=fixtures.compass_bearing,
                velocity=fixtures.velocity,
            ),
        ),
        RequestStep(
            "Live Announcement Request",
            topics.ANNOUNCEMENT_TOPIC,
            LiveAnnouncementRequest(
                announcement_id=fixtures.announcement_id,
                content_url=fixtures.announcement_url,
            ),
        ),
        RequestStep(
            "Notification Response",
            topics.NOTIFICATION_TOPIC,
            NotificationResponse(
                notification_id=fixtures.notification_id,
                description=fixtures.notification_description,
            ),
        ),
        RequestStep(
            "Distress Call Request",
            topics.DISTRESS_TOPIC,
            DistressCallRequest(),
        ),
    ]


async def run_sequence(publish: PublishCallback, steps: Sequence[RequestStep], qos: int = 1, delay: float = 1.0):
    """
    Publishes every step in order, sleeping `delay` seconds between two steps.
    Errors raised by `publish` are not caught.
    """
    logger.info("STARTING TESTS...")

    for index, step in enumerate(steps):
        if index > 0:
            await asyncio.sleep(delay)

        await publish(step.to_message(qos))
        logger.info(f"{step.label} Sent")
