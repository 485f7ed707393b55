"""Startup and shutdown of the telemetry bridge."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, List, Mapping, Optional

from .api import CONNECTION_ERRORS, DeviceInfo, EcoflowRestClient
from .commands import SwitchCommands
from .config import BridgeSettings, Credentials
from .const import MQTT_SUBSCRIBE_TIMEOUT, PRODUCT_NAME, EndpointKind
from .endpoints import DeviceEndpoints
from .exceptions import ApiError, PayloadValidationError
from .mqtt import EcoflowMqttClient
from .projector import AttributeProjector
from .registry import DeviceRegistry
from .router import TelemetryRouter

_LOGGER = logging.getLogger(__name__)


def is_supported(device: DeviceInfo) -> bool:
    return device.product_name.strip().lower() == PRODUCT_NAME.lower()


class EcoflowBridge:
    """Owns the registry, router and transports for one account."""

    def __init__(
        self,
        credentials: Credentials,
        settings: Optional[BridgeSettings] = None,
        rest_client: Optional[EcoflowRestClient] = None,
        mqtt_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.settings = settings or BridgeSettings()
        self.registry = DeviceRegistry()
        self.projector = AttributeProjector(self.settings)
        self.router = TelemetryRouter(self.registry, self.projector)
        self.rest = rest_client or EcoflowRestClient(credentials, host=self.settings.api_host)
        self._mqtt_factory = mqtt_factory or EcoflowMqttClient
        self.mqtt = None

        _LOGGER.debug("Bridge created for %r", credentials)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> EcoflowBridge:
        """Create a bridge; raises ConfigurationError without credentials."""
        credentials = Credentials.from_sources(
            config, os.environ if environ is None else environ
        )
        return cls(credentials, BridgeSettings.from_options(options or {}))

    def _endpoint_kinds(self) -> List[EndpointKind]:
        return [
            kind
            for kind in EndpointKind
            if kind is not EndpointKind.SOLAR or self.settings.solar_enabled
        ]

    async def _async_build_device(self, info: DeviceInfo) -> DeviceEndpoints:
        _LOGGER.debug(
            "Building endpoints for %s (%s)",
            info.serial_number,
            "online" if info.online else "offline",
        )
        device = DeviceEndpoints.build(
            info.serial_number,
            info.product_name,
            info.display_name,
            self._endpoint_kinds(),
        )

        try:
            baseline = await self.rest.async_get_baseline(info.serial_number)
        except (ApiError, PayloadValidationError, *CONNECTION_ERRORS) as err:
            _LOGGER.warning(
                "No baseline for %s, attributes start unset: %s", info.serial_number, err
            )
            baseline = {}

        seeded = self.projector.seed_from_baseline(baseline, device)
        _LOGGER.debug("Seeded %d attributes for %s", seeded, info.serial_number)
        return device

    async def async_start(self) -> List[DeviceEndpoints]:
        """Register every supported device, then open the subscription."""
        _LOGGER.info("Starting %s bridge", PRODUCT_NAME)

        mqtt_credentials = await self.rest.async_get_mqtt_credentials()
        self.mqtt = self._mqtt_factory(mqtt_credentials, self.router.async_handle_message)

        for info in await self.rest.async_get_devices():
            if not is_supported(info):
                _LOGGER.debug(
                    "Skipping %s (%s): not a %s",
                    info.serial_number,
                    info.product_name,
                    PRODUCT_NAME,
                )
                continue

            device = await self._async_build_device(info)
            SwitchCommands(self.mqtt, mqtt_credentials.username, info.serial_number).bind(device)
            self.registry.register(info.serial_number, device)

        if not len(self.registry):
            _LOGGER.warning("No %s devices found on this account", PRODUCT_NAME)

        # Registration is complete before any message can be routed
        self.mqtt.connect()
        try:
            await self.mqtt.wait_subscribed(MQTT_SUBSCRIBE_TIMEOUT)
        except asyncio.TimeoutError:
            # The listener keeps reconnecting in the background
            _LOGGER.warning(
                "MQTT subscription not established after %ss, continuing",
                MQTT_SUBSCRIBE_TIMEOUT,
            )
        return list(self.registry)

    async def async_stop(self) -> None:
        """Close the transports and optionally forget every device."""
        _LOGGER.info("Stopping %s bridge", PRODUCT_NAME)

        if self.mqtt is not None:
            await self.mqtt.disconnect()
        await self.rest.close_session()

        if self.settings.unregister_on_shutdown:
            _LOGGER.info("Unregistering %d devices", len(self.registry))
            self.registry.clear()
