"""EcoFlow DELTA Pro Ultra binary sensor platform."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ecoflow_dpu.const import (
    ATTR_BAT_CHARGE_STATE,
    ATTR_STATUS,
    NS_POWER_SOURCE,
    ChargeState,
    EndpointKind,
    PowerSourceStatus,
)

from .entity import EcoflowEntity, iter_endpoints

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the binary_sensor platform."""
    bridge = entry.runtime_data

    entities: list[EcoflowBinarySensorBase] = []
    for sensor_cls in (GridActiveSensor, SolarActiveSensor, BatteryChargingSensor):
        for device, endpoint in iter_endpoints(bridge, sensor_cls._endpoint_kind):
            entities.append(sensor_cls(device, endpoint))

    async_add_entities(entities)


class EcoflowBinarySensorBase(EcoflowEntity, BinarySensorEntity):
    """Base class for EcoFlow binary sensors."""

    _attr_device_class = BinarySensorDeviceClass.POWER
    _endpoint_kind: EndpointKind
    _namespace = NS_POWER_SOURCE
    _attribute = ATTR_STATUS

    def _update_from_value(self, value: Any) -> None:
        self._attr_is_on = None if value is None else self._compute_is_on(value)

    def _compute_is_on(self, value: Any) -> bool:
        return value == PowerSourceStatus.ACTIVE


class GridActiveSensor(EcoflowBinarySensorBase):
    """Represents whether grid power is coming in."""

    _attr_name = "Grid"
    _attr_icon = "mdi:transmission-tower"
    _endpoint_kind = EndpointKind.GRID


class SolarActiveSensor(EcoflowBinarySensorBase):
    """Represents whether the solar inputs are producing."""

    _attr_name = "Solar"
    _attr_icon = "mdi:solar-panel"
    _endpoint_kind = EndpointKind.SOLAR


class BatteryChargingSensor(EcoflowBinarySensorBase):
    """Represents whether the battery is charging."""

    _attr_name = "Battery charging"
    _attr_device_class = BinarySensorDeviceClass.BATTERY_CHARGING
    _endpoint_kind = EndpointKind.BATTERY
    _attribute = ATTR_BAT_CHARGE_STATE

    def _compute_is_on(self, value: Any) -> bool:
        return value == ChargeState.IS_CHARGING
