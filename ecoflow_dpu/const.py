"""Constants for the EcoFlow DELTA Pro Ultra bridge."""

from enum import Enum, IntEnum

PRODUCT_NAME = "DELTA Pro Ultra"
MANUFACTURER = "EcoFlow"

# Open platform REST API
ECOFLOW_API_HOST = "https://api-a.ecoflow.com"
API_DEVICE_LIST_ENDPOINT = "/iot-open/sign/device/list"
API_QUOTA_ALL_ENDPOINT = "/iot-open/sign/device/quota/all"
API_CERTIFICATION_ENDPOINT = "/iot-open/sign/certification"
API_TIMEOUT = 15

# Environment fallbacks for the credentials
ENV_ACCESS_KEY = "ECOFLOW_ACCESS_KEY"
ENV_SECRET_KEY = "ECOFLOW_SECRET_KEY"

# MQTT topics
# Telemetry FROM device: /open/{account}/{sn}/quota
# Online state:          /open/{account}/{sn}/status
# Commands TO device:    /open/{account}/{sn}/set
TOPIC_QUOTA = "quota"
TOPIC_STATUS = "status"
TOPIC_SET = "set"
TOPIC_SERIAL_INDEX = 3
MQTT_RECONNECT_DELAY = 5
MQTT_KEEPALIVE = 60
MQTT_SUBSCRIBE_TIMEOUT = 15

# Firmware subsystems reporting each command family
ADDR_APPSHOW = "hs_yj751_pd_appshow_addr"
ADDR_BACKEND = "hs_yj751_pd_backend_addr"
ADDR_APP_SET_INFO = "hs_yj751_pd_app_set_info_addr"

CMD_ID_APPSHOW = 1
CMD_ID_BACKEND = 2
CMD_ID_APP_SET_INFO = 3

# Outbound command codes
CMD_CODE_AC_OUTPUT = "YJ751_PD_AC_DSG_SET"
CMD_CODE_DC_OUTPUT = "YJ751_PD_DC_SWITCH_SET"

# showFlag bits
SHOW_FLAG_AC_ON = 0x04
SHOW_FLAG_DC_ON = 0x02

DEFAULT_LOW_BATTERY_THRESHOLD = 10

# Attribute namespaces
NS_POWER_SOURCE = "powerSource"
NS_ELECTRICAL_POWER = "electricalPowerMeasurement"
NS_ON_OFF = "onOff"

# Attribute names
ATTR_STATUS = "status"
ATTR_BAT_PERCENT_REMAINING = "batPercentRemaining"
ATTR_BAT_CHARGE_LEVEL = "batChargeLevel"
ATTR_BAT_CHARGE_STATE = "batChargeState"
ATTR_BAT_TIME_REMAINING = "batTimeRemaining"
ATTR_ACTIVE_POWER = "activePower"
ATTR_ACTIVE_CURRENT = "activeCurrent"
ATTR_VOLTAGE = "voltage"
ATTR_ON_OFF = "onOff"

# Switch commands
COMMAND_ON = "on"
COMMAND_OFF = "off"


class EndpointKind(str, Enum):
    """Named sub-endpoints exposed for each device."""

    BATTERY = "Battery"
    GRID = "Grid"
    SOLAR = "Solar"
    AC_INPUT = "ACInput"
    AC_OUTPUT = "ACOutput"
    DC_OUTPUT = "DCOutput"
    AC_SWITCH = "ACSwitch"
    DC_SWITCH = "DCSwitch"


class PowerSourceStatus(IntEnum):
    """Power source status values."""

    UNSPECIFIED = 0
    ACTIVE = 1
    STANDBY = 2
    UNAVAILABLE = 3


class ChargeLevel(IntEnum):
    """Battery charge level values."""

    OK = 0
    WARNING = 1
    CRITICAL = 2


class ChargeState(IntEnum):
    """Battery charge state values."""

    UNKNOWN = 0
    IS_CHARGING = 1
    IS_AT_FULL_CHARGE = 2
    IS_NOT_CHARGING = 3


# Attribute set of every sub-endpoint, fixed at creation
ENDPOINT_ATTRIBUTES: dict[EndpointKind, tuple[tuple[str, str], ...]] = {
    EndpointKind.BATTERY: (
        (NS_POWER_SOURCE, ATTR_STATUS),
        (NS_POWER_SOURCE, ATTR_BAT_PERCENT_REMAINING),
        (NS_POWER_SOURCE, ATTR_BAT_CHARGE_LEVEL),
        (NS_POWER_SOURCE, ATTR_BAT_CHARGE_STATE),
        (NS_POWER_SOURCE, ATTR_BAT_TIME_REMAINING),
    ),
    EndpointKind.GRID: (
        (NS_POWER_SOURCE, ATTR_STATUS),
    ),
    EndpointKind.SOLAR: (
        (NS_POWER_SOURCE, ATTR_STATUS),
        (NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER),
    ),
    EndpointKind.AC_INPUT: (
        (NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER),
        (NS_ELECTRICAL_POWER, ATTR_ACTIVE_CURRENT),
        (NS_ELECTRICAL_POWER, ATTR_VOLTAGE),
    ),
    EndpointKind.AC_OUTPUT: (
        (NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER),
    ),
    EndpointKind.DC_OUTPUT: (
        (NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER),
    ),
    EndpointKind.AC_SWITCH: (
        (NS_ON_OFF, ATTR_ON_OFF),
    ),
    EndpointKind.DC_SWITCH: (
        (NS_ON_OFF, ATTR_ON_OFF),
    ),
}
