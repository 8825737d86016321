"""
Data Models for the VDV-301 Request Payloads and the MQTT Envelope.

Every request is a frozen dataclass holding only its scalar parameters.
The XML is produced on demand by `to_xml()`, which stamps each rendering
with a fresh MessageId and the current UTC time, so two renderings of the
same request are never identical.
"""
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict
from xml.sax.saxutils import escape
import uuid

NETEX_NS = "http://www.netex.org.uk/netex"
GML_NS = "http://www.opengis.net/gml/3.2"
XS_NS = "http://www.w3.org/2001/XMLSchema"

PAYLOAD_VERSION = "1.0"

# Attribute values are always double quoted in the templates below.
_ATTRIBUTE_ENTITIES = {'"': "&quot;"}


def utc_timestamp() -> str:
    """Current UTC time as YYYY-MM-DDTHH:MM:SS.mmmZ."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def new_message_id() -> str:
    return str(uuid.uuid4())


def xml_value(value: Any) -> str:
    """Renders a parameter so it is safe inside element text or a quoted attribute."""
    return escape(str(value), _ATTRIBUTE_ENTITIES)


# --- Base Class ---

@dataclass(frozen=True, kw_only=True)
class BaseRequest:
    """Base class for all XML payloads sent over MQTT."""
    root_tag: ClassVar[str]
    template: ClassVar[str]

    def template_values(self) -> Dict[str, str]:
        """The escaped dataclass fields, keyed by field name."""
        return {f.name: xml_value(getattr(self, f.name)) for f in fields(self)}

    def to_xml(self) -> str:
        """Renders the payload with a new MessageId and the current timestamp."""
        return self.template.format(
            timestamp=utc_timestamp(),
            message_id=new_message_id(),
            version=PAYLOAD_VERSION,
            netex_ns=NETEX_NS,
            gml_ns=GML_NS,
            xs_ns=XS_NS,
            **self.template_values(),
        )

    def to_bytes(self) -> bytes:
        """Converts the payload to UTF-8 encoded bytes for MQTT."""
        return self.to_xml().encode('utf-8')


# --- Technical Vehicle LogOn / LogOff ---

@dataclass(frozen=True, kw_only=True)
class TechnicalLogOnRequest(BaseRequest):
    vehicle_ref: str
    obu_id: str
    base_version: str

    root_tag: ClassVar[str] = "TechnicalVehicleLogOnRequestStructure"
    template: ClassVar[str] = """\
<TechnicalVehicleLogOnRequestStructure xmlns:netex="{netex_ns}">
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <netex:VehicleRef ref="{vehicle_ref}" nameOfRefClass="Vehicle" version="{version}" />
    <OnboardUnitId>{obu_id}</OnboardUnitId>
    <BaseVersion>{base_version}</BaseVersion>
    <Extensions>
        <VendorExtension>dummy-value</VendorExtension>
    </Extensions>
</TechnicalVehicleLogOnRequestStructure>
"""


@dataclass(frozen=True, kw_only=True)
class TechnicalLogOffRequest(BaseRequest):
    vehicle_ref: str

    root_tag: ClassVar[str] = "TechnicalVehicleLogOffRequestStructure"
    template: ClassVar[str] = """\
<TechnicalVehicleLogOffRequestStructure xmlns:netex="{netex_ns}">
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <netex:VehicleRef ref="{vehicle_ref}" version="{version}" />
    <Extensions>
        <VendorExtension>dummy-value</VendorExtension>
    </Extensions>
</TechnicalVehicleLogOffRequestStructure>
"""


# --- Driver LogOn / LogOff ---

@dataclass(frozen=True, kw_only=True)
class LogOnRequest(BaseRequest):
    vehicle_ref: str
    driver_ref: str

    root_tag: ClassVar[str] = "DriverVehicleLogOnRequestStructure"
    template: ClassVar[str] = """\
<DriverVehicleLogOnRequestStructure xmlns:netex="{netex_ns}">
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <netex:VehicleRef ref="{vehicle_ref}" version="{version}"/>
    <netex:DriverRef ref="{driver_ref}" version="{version}"/>
</DriverVehicleLogOnRequestStructure>
"""


@dataclass(frozen=True, kw_only=True)
class LogOffRequest(BaseRequest):
    vehicle_ref: str
    driver_ref: str

    root_tag: ClassVar[str] = "DriverVehicleLogOffRequestStructure"
    template: ClassVar[str] = """\
<DriverVehicleLogOffRequestStructure xmlns:netex="{netex_ns}">
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <netex:VehicleRef ref="{vehicle_ref}" version="{version}"/>
    <netex:DriverRef ref="{driver_ref}" version="{version}"/>
    <Extensions>
        <VendorExtension>dummy-value</VendorExtension>
    </Extensions>
</DriverVehicleLogOffRequestStructure>
"""


# --- Operational LogOn / LogOff ---

# Shared body of the operational requests, the only difference is the root tag.
_OPERATIONAL_BODY = """\
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <netex:VehicleRef ref="{vehicle_ref}" version="{version}"/>
    <DatedJourneyRef>
        <VehicleJourneyRef ref="{vehicle_journey_ref}" nameOfRefClass="VehicleJourney" modification="new" versionRef="{version}" created="{timestamp}" changed="{timestamp}" version="{version}"/>
        <OperatingDayRef ref="{operating_day_ref}" nameOfRefClass="OperatingDay" modification="revise" versionRef="{version}" created="{timestamp}" changed="{timestamp}" version="{version}"/>
        <BlockRef ref="{block_ref}" nameOfRefClass="Block" modification="new" versionRef="{version}" created="{timestamp}" changed="{timestamp}" version="{version}"/>
    </DatedJourneyRef>
    <netex:JourneyPatternRef ref="{journey_pattern_ref}" nameOfRefClass="JourneyPattern" modification="new" versionRef="{version}" created="{timestamp}" changed="{timestamp}" version="{version}"/>
    <Extensions/>
"""


@dataclass(frozen=True, kw_only=True)
class OperationalLogOnRequest(BaseRequest):
    vehicle_ref: str
    vehicle_journey_ref: str
    operating_day_ref: str
    block_ref: str
    journey_pattern_ref: str

    root_tag: ClassVar[str] = "OperationalVehicleLogOnRequestStructure"
    template: ClassVar[str] = (
        '<OperationalVehicleLogOnRequestStructure xmlns:netex="{netex_ns}">\n'
        + _OPERATIONAL_BODY
        + "</OperationalVehicleLogOnRequestStructure>\n"
    )


@dataclass(frozen=True, kw_only=True)
class OperationalLogOffRequest(BaseRequest):
    vehicle_ref: str
    vehicle_journey_ref: str
    operating_day_ref: str
    block_ref: str
    journey_pattern_ref: str

    root_tag: ClassVar[str] = "OperationalVehicleLogOffRequestStructure"
    template: ClassVar[str] = (
        '<OperationalVehicleLogOffRequestStructure xmlns:netex="{netex_ns}">\n'
        + _OPERATIONAL_BODY
        + "</OperationalVehicleLogOffRequestStructure>\n"
    )


# --- Predefined Message ---

@dataclass(frozen=True, kw_only=True)
class PredefinedMessageRequest(BaseRequest):
    """The driver's predefined code is kept for reference only, the backend reads `description`."""
    message_code: str
    description: str

    root_tag: ClassVar[str] = "PredefinedMessageRequest"
    template: ClassVar[str] = """\
<PredefinedMessageRequest
    xmlns:xs="{xs_ns}"
    xs:version="{version}"
    xs:dateTime="{timestamp}">
    <MessageId>{message_id}</MessageId>
    <MessageData description="{description}"/>
</PredefinedMessageRequest>
"""


# --- Active Ride (GNSS) ---

@dataclass(frozen=True, kw_only=True)
class GnssPhysicalPositionRequest(BaseRequest):
    """Fire-and-forget position report, there is no response topic for it."""
    publisher_id: str
    longitude: float
    latitude: float
    altitude: float
    precision: float
    visible_satellites: int
    compass_bearing: float
    velocity: float

    root_tag: ClassVar[str] = "GnssPhysicalPositionDataStructure"
    template: ClassVar[str] = """\
<GnssPhysicalPositionDataStructure xmlns:gml="{gml_ns}">
    <Timestamp>{timestamp}</Timestamp>
    <Version>{version}</Version>
    <MessageId>{message_id}</MessageId>
    <TimestampOfMeasurement>{timestamp}</TimestampOfMeasurement>
    <PublisherId>{publisher_id}</PublisherId>

    <GnssPhysicalPosition>
      <WGS84PhysicalPosition id="loc1" srsName="EPSG:4326">
        <Longitude>{longitude}</Longitude>
        <Latitude>{latitude}</Latitude>
        <Altitude>{altitude}</Altitude>
        <gml:pos>{longitude} {latitude} {altitude}</gml:pos>
        <Precision>{precision}</Precision>
      </WGS84PhysicalPosition>

      <NumberOfVisibleSatellites>{visible_satellites}</NumberOfVisibleSatellites>
      <CompassBearing>{compass_bearing}</CompassBearing>
      <Velocity>{velocity}</Velocity>
    </GnssPhysicalPosition>

    <Extensions/>
</GnssPhysicalPositionDataStructure>
"""


# --- Announcement / Notification / Distress ---

@dataclass(frozen=True, kw_only=True)
class LiveAnnouncementRequest(BaseRequest):
    announcement_id: str
    content_url: str

    root_tag: ClassVar[str] = "ReceivedAnnouncement"
    template: ClassVar[str] = """\
<ReceivedAnnouncement
  xmlns:xs="{xs_ns}"
  xs:version="{version}"
  xs:dateTime="{timestamp}">
  <MessageId>{message_id}</MessageId>
  <Announcement id="{announcement_id}" content="{content_url}"/>
</ReceivedAnnouncement>
"""


@dataclass(frozen=True, kw_only=True)
class NotificationResponse(BaseRequest):
    notification_id: str
    description: str

    root_tag: ClassVar[str] = "NotificationResponse"
    template: ClassVar[str] = """\
<NotificationResponse
  xmlns:xs="{xs_ns}"
  xs:version="{version}"
  xs:dateTime="{timestamp}">
  <MessageId>{message_id}</MessageId>
  <Notification id="{notification_id}">
    <Description>{description}</Description>
    <SentTime>{timestamp}</SentTime>
  </Notification>
</NotificationResponse>
"""


@dataclass(frozen=True, kw_only=True)
class DistressCallRequest(BaseRequest):
    root_tag: ClassVar[str] = "DistressCallRequest"
    template: ClassVar[str] = """\
<DistressCallRequest
  xmlns:xs="{xs_ns}"
  xs:version="{version}"
  xs:dateTime="{timestamp}">
  <MessageId>{message_id}</MessageId>
</DistressCallRequest>
"""


# --- The "Envelope" (The MQTT Context) ---

@dataclass(frozen=True)
class MQTTMessage:
    """
    Represents a full MQTT message (topic + rendered payload).

    Field names follow aiomqtt's `Client.publish` so the envelope can be
    passed straight through with `to_aiomqtt_args()`.
    """
    topic: str
    payload: bytes
    qos: int = 1
    retain: bool = False

    def to_aiomqtt_args(self) -> Dict[str, Any]:
        """Returns dict suitable for client.publish(**args)"""
        return {
            "topic": self.topic,
            "payload": self.payload,
            "qos": self.qos,
            "retain": self.retain,
        }
