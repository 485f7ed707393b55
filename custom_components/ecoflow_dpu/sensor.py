"""EcoFlow DELTA Pro Ultra sensor platform."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import (
    PERCENTAGE,
    UnitOfElectricCurrent,
    UnitOfElectricPotential,
    UnitOfPower,
    UnitOfTime,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ecoflow_dpu.const import (
    ATTR_ACTIVE_CURRENT,
    ATTR_ACTIVE_POWER,
    ATTR_BAT_CHARGE_LEVEL,
    ATTR_BAT_PERCENT_REMAINING,
    ATTR_BAT_TIME_REMAINING,
    ATTR_STATUS,
    ATTR_VOLTAGE,
    NS_ELECTRICAL_POWER,
    NS_POWER_SOURCE,
    ChargeLevel,
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
    """Set up the sensor platform."""
    bridge = entry.runtime_data

    entities: list[EcoflowSensorBase] = []
    for sensor_cls in SENSORS:
        for device, endpoint in iter_endpoints(bridge, sensor_cls._endpoint_kind):
            entities.append(sensor_cls(device, endpoint))

    async_add_entities(entities)


class EcoflowSensorBase(EcoflowEntity, SensorEntity):
    """Base class for EcoFlow sensors."""

    _endpoint_kind: EndpointKind

    def _update_from_value(self, value: Any) -> None:
        self._attr_native_value = None if value is None else self._convert(value)

    def _convert(self, value: Any) -> Any:
        return value


class EcoflowMilliSensor(EcoflowSensorBase):
    """Sensor for attributes published in milli-units."""

    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_suggested_display_precision = 1
    _namespace = NS_ELECTRICAL_POWER

    def _convert(self, value: Any) -> float:
        return value / 1000


class BatteryLevelSensor(EcoflowSensorBase):
    """Represents the battery state of charge."""

    _attr_name = "Battery level"
    _attr_device_class = SensorDeviceClass.BATTERY
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _endpoint_kind = EndpointKind.BATTERY
    _namespace = NS_POWER_SOURCE
    _attribute = ATTR_BAT_PERCENT_REMAINING

    def _convert(self, value: Any) -> float:
        # Published on a 0-200 half-percent scale
        return value / 2


class BatteryChargeLevelSensor(EcoflowSensorBase):
    """Represents the battery charge level (ok/warning/critical)."""

    _attr_name = "Battery charge level"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [level.name.lower() for level in ChargeLevel]
    _attr_icon = "mdi:battery-alert-variant-outline"
    _endpoint_kind = EndpointKind.BATTERY
    _namespace = NS_POWER_SOURCE
    _attribute = ATTR_BAT_CHARGE_LEVEL

    def _convert(self, value: Any) -> str:
        return ChargeLevel(value).name.lower()


class BatteryStatusSensor(EcoflowSensorBase):
    """Represents the battery power source status."""

    _attr_name = "Battery status"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [status.name.lower() for status in PowerSourceStatus]
    _attr_icon = "mdi:home-battery-outline"
    _endpoint_kind = EndpointKind.BATTERY
    _namespace = NS_POWER_SOURCE
    _attribute = ATTR_STATUS

    def _convert(self, value: Any) -> str:
        return PowerSourceStatus(value).name.lower()


class BatteryTimeRemainingSensor(EcoflowSensorBase):
    """Represents the remaining discharge time."""

    _attr_name = "Battery time remaining"
    _attr_device_class = SensorDeviceClass.DURATION
    _attr_native_unit_of_measurement = UnitOfTime.SECONDS
    _attr_suggested_unit_of_measurement = UnitOfTime.HOURS
    _attr_icon = "mdi:timer-sand"
    _endpoint_kind = EndpointKind.BATTERY
    _namespace = NS_POWER_SOURCE
    _attribute = ATTR_BAT_TIME_REMAINING


class EcoflowPowerSensor(EcoflowMilliSensor):
    """Base class for power sensors."""

    _attr_device_class = SensorDeviceClass.POWER
    _attr_native_unit_of_measurement = UnitOfPower.WATT
    _attribute = ATTR_ACTIVE_POWER


class AcInputPowerSensor(EcoflowPowerSensor):
    """Represents the combined AC input power."""

    _attr_name = "AC input power"
    _attr_icon = "mdi:transmission-tower-import"
    _endpoint_kind = EndpointKind.AC_INPUT


class AcOutputPowerSensor(EcoflowPowerSensor):
    """Represents the combined AC output power."""

    _attr_name = "AC output power"
    _attr_icon = "mdi:power-socket"
    _endpoint_kind = EndpointKind.AC_OUTPUT


class DcOutputPowerSensor(EcoflowPowerSensor):
    """Represents the combined DC output power."""

    _attr_name = "DC output power"
    _attr_icon = "mdi:usb-port"
    _endpoint_kind = EndpointKind.DC_OUTPUT


class SolarPowerSensor(EcoflowPowerSensor):
    """Represents the combined solar input power."""

    _attr_name = "Solar power"
    _attr_icon = "mdi:solar-power-variant"
    _endpoint_kind = EndpointKind.SOLAR


class AcInputCurrentSensor(EcoflowMilliSensor):
    """Represents the combined AC input current."""

    _attr_name = "AC input current"
    _attr_device_class = SensorDeviceClass.CURRENT
    _attr_native_unit_of_measurement = UnitOfElectricCurrent.AMPERE
    _attr_icon = "mdi:current-ac"
    _endpoint_kind = EndpointKind.AC_INPUT
    _attribute = ATTR_ACTIVE_CURRENT


class AcInputVoltageSensor(EcoflowMilliSensor):
    """Represents the AC input voltage."""

    _attr_name = "AC input voltage"
    _attr_device_class = SensorDeviceClass.VOLTAGE
    _attr_native_unit_of_measurement = UnitOfElectricPotential.VOLT
    _attr_icon = "mdi:flash"
    _endpoint_kind = EndpointKind.AC_INPUT
    _attribute = ATTR_VOLTAGE


SENSORS = (
    BatteryLevelSensor,
    BatteryChargeLevelSensor,
    BatteryStatusSensor,
    BatteryTimeRemainingSensor,
    AcInputPowerSensor,
    AcOutputPowerSensor,
    DcOutputPowerSensor,
    SolarPowerSensor,
    AcInputCurrentSensor,
    AcInputVoltageSensor,
)
