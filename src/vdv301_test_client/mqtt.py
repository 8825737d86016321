"""
MQTT Connection, Subscription and Response Printing.

This module is responsible for:
- Opening the single aiomqtt connection to the broker with a per-run client id.
- Subscribing to every response topic.
- Handing the active client to the publish sequencer.
- Printing every inbound message to the console.
"""
import asyncio
import functools
import logging
import uuid
from typing import Callable, Optional, Sequence, Union

from aiomqtt import Client as MQTTClient, ProtocolVersion

from vdv301_test_client.models import MQTTMessage
from vdv301_test_client.sequence import RequestStep, run_sequence
from vdv301_test_client.topics import BROKER_HOST, BROKER_PORT, RESPONSE_TOPICS

logger = logging.getLogger(__name__)

ResponsePrinter = Callable[[str, object], None]


def decode_payload(payload: Union[bytes, bytearray, str, None]) -> str:
    """
    Decodes an inbound payload as UTF-8 text.
    Never raises: invalid bytes are returned as an error marker instead.
    """
    if payload is None:
        return ""
    if isinstance(payload, (bytes, bytearray)):
        try:
            return bytes(payload).decode('utf-8')
        except UnicodeDecodeError as e:
            logger.warning(f"Received payload is not valid UTF-8: {e}")
            return f"<undecodable payload: {bytes(payload)!r}>"
    return str(payload)


def print_response(topic: str, payload: Union[bytes, bytearray, str, None]):
    """Writes the topic and the body of a received message to stdout."""
    print("RESPONSE RECEIVED:")
    print(f"Topic: {topic}")
    print(decode_payload(payload))
    print()


class MQTTManager:
    config: dict
    host: str
    port: int
    client_id: str
    qos: int
    response_topics: Sequence[str]
    printer: ResponsePrinter
    _listener_task: Optional[asyncio.Task]

    """
    Owns the one broker connection of a test run.
    """
    def __init__(self, config: dict, printer: ResponsePrinter = print_response):
        self.config = config

        # The endpoint is fixed, only the identity and QoS come from config
        self.host = BROKER_HOST
        self.port = BROKER_PORT
        prefix = self.config.get('client_id_prefix', 'test-client')
        self.client_id = f"{prefix}-{uuid.uuid4()}"
        self.qos = int(self.config.get('qos', 1))

        self.response_topics = RESPONSE_TOPICS
        self.printer = printer

        # Internal state
        self._listener_task: Optional[asyncio.Task] = None

    async def run(self, steps: Sequence[RequestStep], delay: float = 1.0):
        """
        Connects, subscribes, publishes the script and then listens forever.

        Connection, subscription and publish errors (aiomqtt.MqttError) are
        not caught here, the run cannot go on without the broker.
        """
        logger.info(f"Connecting to broker {self.host}:{self.port} as {self.client_id}...")

        # The connection is ONLY valid inside this block
        async with MQTTClient(self.host,
                              self.port,
                              protocol=ProtocolVersion.V5,
                              identifier=self.client_id) as client:
            logger.info("Connected")

            # Start listening before subscribing so no early response is missed
            self._listener_task = asyncio.create_task(self._listener_loop(client))
            try:
                await self.subscribe_all(client)
                await run_sequence(functools.partial(self.publish, client), steps, qos=self.qos, delay=delay)

                logger.info("Listening for responses (Press Ctrl+C to quit)...")
                await self._listener_task
            finally:
                self._listener_task.cancel()
                try:
                    await self._listener_task
                except asyncio.CancelledError:
                    pass

    async def subscribe_all(self, client: MQTTClient):
        """Subscribes to every response topic at the configured QoS."""
        for topic in self.response_topics:
            await client.subscribe(topic, qos=self.qos)
            logger.debug(f"Subscribed to '{topic}' (qos={self.qos})")

        logger.info("Subscribed to all response topics")

    async def publish(self, client: MQTTClient, message: MQTTMessage):
        await client.publish(**message.to_aiomqtt_args())
        logger.debug(f"Published {len(message.payload)} bytes to topic '{message.topic}'")

    async def _listener_loop(self, client: MQTTClient):
        """Prints every inbound message, no other action is taken."""
        async for message in client.messages:
            self.printer(str(message.topic), message.payload)
