import xml.etree.ElementTree as ET
from unittest.mock import AsyncMock, patch

import pytest

from vdv301_test_client import topics
from vdv301_test_client.models import MQTTMessage
from vdv301_test_client.sequence import RequestFixtures, build_test_sequence, run_sequence

"""
Tests for the scripted request sequence: the order, the topics,
the fixture overrides and the pacing between publishes.
"""

EXPECTED_ORDER = [
    (topics.TECHNICAL_LOGIN_TOPIC, "TechnicalVehicleLogOnRequestStructure"),
    (topics.TECHNICAL_LOGOUT_TOPIC, "TechnicalVehicleLogOffRequestStructure"),
    (topics.LOGIN_TOPIC, "DriverVehicleLogOnRequestStructure"),
    (topics.LOGOUT_TOPIC, "DriverVehicleLogOffRequestStructure"),
    (topics.OPERATIONAL_LOGIN_TOPIC, "OperationalVehicleLogOnRequestStructure"),
    (topics.OPERATIONAL_LOGOUT_TOPIC, "OperationalVehicleLogOffRequestStructure"),
    (topics.PREDEFINED_MESSAGE_TOPIC, "PredefinedMessageRequest"),
    (topics.GNSS_POSITION_TOPIC, "GnssPhysicalPositionDataStructure"),
    (topics.ANNOUNCEMENT_TOPIC, "ReceivedAnnouncement"),
    (topics.NOTIFICATION_TOPIC, "NotificationResponse"),
    (topics.DISTRESS_TOPIC, "DistressCallRequest"),
]

def test_sequence_order_and_topics():
    steps = build_test_sequence(RequestFixtures())

    assert [(step.topic, step.request.root_tag) for step in steps] == EXPECTED_ORDER

def test_gnss_topic_is_hierarchical():
    assert topics.GNSS_POSITION_TOPIC == (
        "IoM/1.0/DataVersion/1.0/Country/DE/BE/Organisation/MVG/100/Vehicle/BUS/1234"
        "/PhysicalPosition/GnssPhysicalPositionData"
    )

def test_response_topics_are_the_fixed_list():
    assert topics.RESPONSE_TOPICS == (
        "vdv/test/login/response",
        "vdv/test/logout/response",
        "vdv/test/operational_login/response",
        "vdv/test/operational_logout/response",
        "vdv/test/predefined_message/response",
        "vdv/test/technical_login/response",
        "vdv/test/technical_logout/response",
    )

def test_fixtures_default_to_demo_values():
    fixtures = RequestFixtures.from_config({})

    assert fixtures == RequestFixtures()
    assert fixtures.vehicle_ref == "de:mvg:5812"
    assert fixtures.obu_id == "obu-123"
    assert fixtures.message_description == "Traffic Jam - 10 min delay"

def test_fixtures_overrides_and_unknown_keys(caplog):
    fixtures = RequestFixtures.from_config({"fixtures": {"obu_id": "obu-999", "colour": "red"}})

    assert fixtures.obu_id == "obu-999"
    assert fixtures.vehicle_ref == "de:mvg:5812"
    assert "colour" in caplog.text

def test_overridden_fixture_reaches_payload():
    steps = build_test_sequence(RequestFixtures(obu_id="obu-999"))
    root = ET.fromstring(steps[0].request.to_xml())

    assert root.findtext("OnboardUnitId") == "obu-999"

def test_step_to_message_renders_envelope():
    step = build_test_sequence(RequestFixtures())[-1]
    message = step.to_message(qos=2)

    assert isinstance(message, MQTTMessage)
    assert message.topic == topics.DISTRESS_TOPIC
    assert message.qos == 2
    assert ET.fromstring(message.payload.decode("utf-8")).tag == "DistressCallRequest"

@pytest.mark.asyncio
@patch('vdv301_test_client.sequence.asyncio.sleep', new_callable=AsyncMock)
async def test_run_sequence_publishes_in_order_with_delays(mock_sleep):
    steps = build_test_sequence(RequestFixtures())
    publish = AsyncMock()

    await run_sequence(publish, steps, qos=1, delay=1.0)

    published_topics = [call.args[0].topic for call in publish.await_args_list]
    assert published_topics == [step.topic for step in steps]
    assert all(call.args[0].qos == 1 for call in publish.await_args_list)

    # A pause between two publishes, none after the last one
    assert mock_sleep.await_count == len(steps) - 1
    mock_sleep.assert_awaited_with(1.0)

@pytest.mark.asyncio
@patch('vdv301_test_client.sequence.asyncio.sleep', new_callable=AsyncMock)
async def test_run_sequence_does_not_swallow_publish_errors(mock_sleep):
    steps = build_test_sequence(RequestFixtures())
    publish = AsyncMock(side_effect=[None, RuntimeError("broker gone")])

    with pytest.raises(RuntimeError):
        await run_sequence(publish, steps, delay=0)

    assert publish.await_count == 2

@pytest.mark.parametrize("fixtures", [["obu_id", "x"], "obu-999", 42])
def test_fixtures_must_be_a_mapping(fixtures):
    with pytest.raises(ValueError):
        RequestFixtures.from_config({"fixtures": fixtures})

@pytest.mark.asyncio
@patch('vdv301_test_client.sequence.asyncio.sleep', new_callable=AsyncMock)
async def test_run_sequence_logs_each_publish(mock_sleep, caplog):
    steps = build_test_sequence(RequestFixtures())

    with caplog.at_level("INFO", logger="vdv301_test_client.sequence"):
        await run_sequence(AsyncMock(), steps, delay=0)

    for step in steps:
        assert f"{step.label} Sent" in caplog.text
    assert "Technical LogOn Request Sent" in caplog.text
