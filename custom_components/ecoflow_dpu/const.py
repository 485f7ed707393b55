"""Constants for the EcoFlow DELTA Pro Ultra integration."""

from ecoflow_dpu.config import (
    CONF_ACCESS_KEY,
    CONF_LOW_BATTERY_THRESHOLD,
    CONF_SECRET_KEY,
    CONF_SOLAR_ENABLED,
    CONF_UNREGISTER_ON_SHUTDOWN,
    CONF_VOLTAGE_POLICY,
)
from ecoflow_dpu.const import DEFAULT_LOW_BATTERY_THRESHOLD, MANUFACTURER, PRODUCT_NAME
from ecoflow_dpu.units import VoltagePolicy

DOMAIN = "ecoflow_dpu"

DEFAULT_VOLTAGE_POLICY = VoltagePolicy.NULL_IF_BOTH_PRESENT.value
DEFAULT_SOLAR_ENABLED = False
DEFAULT_UNREGISTER_ON_SHUTDOWN = False

VOLTAGE_POLICIES = {
    VoltagePolicy.AVERAGE_IF_BOTH_PRESENT.value: "Average both inputs",
    VoltagePolicy.NULL_IF_BOTH_PRESENT.value: "Unknown when both inputs are live",
}

__all__ = [
    "CONF_ACCESS_KEY",
    "CONF_LOW_BATTERY_THRESHOLD",
    "CONF_SECRET_KEY",
    "CONF_SOLAR_ENABLED",
    "CONF_UNREGISTER_ON_SHUTDOWN",
    "CONF_VOLTAGE_POLICY",
    "DEFAULT_LOW_BATTERY_THRESHOLD",
    "DEFAULT_SOLAR_ENABLED",
    "DEFAULT_UNREGISTER_ON_SHUTDOWN",
    "DEFAULT_VOLTAGE_POLICY",
    "DOMAIN",
    "MANUFACTURER",
    "PRODUCT_NAME",
    "VOLTAGE_POLICIES",
]
