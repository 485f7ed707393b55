"""MQTT transport for EcoFlow open platform telemetry and commands."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, List, Optional

import aiomqtt

from .api import MqttCredentials
from .const import MQTT_KEEPALIVE, MQTT_RECONNECT_DELAY, TOPIC_QUOTA, TOPIC_STATUS
from .exceptions import CommandError

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], Awaitable[None]]


def get_subscription_topics(account: str) -> List[str]:
    """Get the wildcard topics covering every device of the account."""
    return [
        f"/open/{account}/+/{TOPIC_QUOTA}",
        f"/open/{account}/+/{TOPIC_STATUS}",
    ]


class EcoflowMqttClient:
    """Keeps the broker connection alive and feeds messages to a handler."""

    def __init__(
        self,
        credentials: MqttCredentials,
        handler: MessageHandler,
        reconnect_delay: float = MQTT_RECONNECT_DELAY,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Broker address and certificate account
            handler: Coroutine awaited for each (topic, payload), one at a time
            reconnect_delay: Seconds to wait before reconnecting
        """
        self.credentials = credentials
        self.account = credentials.username
        self.topics = get_subscription_topics(self.account)
        self._handler = handler
        self._reconnect_delay = reconnect_delay
        self._identifier = f"ecoflow_dpu_{uuid.uuid4().hex[:12]}"

        self._client: Optional[aiomqtt.Client] = None
        self._connected = False
        self._listener_task: Optional[asyncio.Task] = None
        self._subscribed = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """Start the listener task."""
        self._connected = True
        self._listener_task = asyncio.create_task(self._listen())

    async def wait_subscribed(self, timeout: Optional[float] = None) -> None:
        """Wait until the first subscription has been established."""
        await asyncio.wait_for(self._subscribed.wait(), timeout)

    async def _listen(self) -> None:
        """Main MQTT listening loop."""
        tls_params = aiomqtt.TLSParameters() if self.credentials.use_tls else None

        while self._connected:
            try:
                async with aiomqtt.Client(
                    hostname=self.credentials.host,
                    port=self.credentials.port,
                    username=self.credentials.username,
                    password=self.credentials.password,
                    identifier=self._identifier,
                    keepalive=MQTT_KEEPALIVE,
                    tls_params=tls_params,
                ) as client:
                    self._client = client
                    _LOGGER.info(
                        "Connected to MQTT broker %s:%s",
                        self.credentials.host,
                        self.credentials.port,
                    )

                    for topic in self.topics:
                        await client.subscribe(topic)
                    self._subscribed.set()
                    _LOGGER.info("Subscribed to %s", ", ".join(self.topics))

                    # Messages are handled strictly one after another
                    async for message in client.messages:
                        try:
                            await self._handler(str(message.topic), message.payload)
                        except Exception as e:
                            _LOGGER.error("Error processing message on %s: %s", message.topic, e)

            except aiomqtt.MqttError as mqtt_err:
                error_str = str(mqtt_err)
                if "135" in error_str or "Not authorized" in error_str:
                    _LOGGER.error(
                        "MQTT authentication failed (code 135). Check credentials. Error: %s",
                        mqtt_err,
                    )
                else:
                    _LOGGER.warning(
                        "MQTT connection error, will retry in %ss: %s",
                        self._reconnect_delay,
                        mqtt_err,
                    )
            except asyncio.CancelledError:
                _LOGGER.debug("MQTT listener cancelled")
                raise
            finally:
                self._client = None

            if self._connected:
                await asyncio.sleep(self._reconnect_delay)

    async def async_publish(self, topic: str, payload: bytes) -> None:
        """Publish a control message; raises CommandError when it cannot be sent."""
        if self._client is None:
            raise CommandError("not connected to MQTT")

        try:
            await self._client.publish(topic, payload)
        except aiomqtt.MqttError as err:
            raise CommandError(str(err)) from err

    async def disconnect(self) -> None:
        """Disconnect from MQTT server."""
        if self._listener_task is None:
            return

        self._connected = False
        self._listener_task.cancel()

        try:
            await self._listener_task
        except asyncio.CancelledError:
            _LOGGER.debug("Listener task cancelled")

        self._listener_task = None
        self._client = None
