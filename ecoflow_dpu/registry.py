"""Lookup from device serial number to its endpoint handle."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional

from .endpoints import DeviceEndpoints

_LOGGER = logging.getLogger(__name__)


class DeviceRegistry:
    """Devices tracked by this bridge instance.

    Populated during startup before the MQTT subscription opens, then only
    read from the message handler.
    """

    def __init__(self) -> None:
        self._devices: Dict[str, DeviceEndpoints] = {}

    def register(self, serial_number: str, device: DeviceEndpoints) -> DeviceEndpoints:
        """Register a device; registering a known serial keeps the first handle."""
        existing = self._devices.get(serial_number)
        if existing is not None:
            _LOGGER.debug("Device %s already registered", serial_number)
            return existing

        self._devices[serial_number] = device
        _LOGGER.info(
            "Registered device %s (%s) with endpoints: %s",
            serial_number,
            device.display_name,
            ", ".join(endpoint.kind.value for endpoint in device),
        )
        return device

    def lookup(self, serial_number: str) -> Optional[DeviceEndpoints]:
        return self._devices.get(serial_number)

    def clear(self) -> None:
        """Drop every device, used when unregistering on shutdown."""
        self._devices.clear()

    def __contains__(self, serial_number: object) -> bool:
        return serial_number in self._devices

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[DeviceEndpoints]:
        return iter(list(self._devices.values()))
