import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryError, ConfigEntryNotReady

from ecoflow_dpu import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    EcoflowBridge,
)
from ecoflow_dpu.api import CONNECTION_ERRORS

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.SENSOR,
    Platform.SWITCH,
]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up EcoFlow DELTA Pro Ultra from a config entry."""
    try:
        bridge = EcoflowBridge.from_config(entry.data, entry.options)
    except ConfigurationError as err:
        # Never run the telemetry path without a data source
        raise ConfigEntryError(str(err)) from err

    try:
        devices = await bridge.async_start()
    except AuthenticationError as err:
        await bridge.async_stop()
        raise ConfigEntryAuthFailed(str(err)) from err
    except (ApiError, *CONNECTION_ERRORS) as err:
        await bridge.async_stop()
        raise ConfigEntryNotReady(f"EcoFlow API unavailable: {err}") from err

    _LOGGER.info("Tracking %d devices", len(devices))
    entry.runtime_data = bridge

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Register options update listener
    entry.async_on_unload(entry.add_update_listener(async_update_options))

    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload so the new projection settings take effect."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unloaded and entry.runtime_data:
        await entry.runtime_data.async_stop()

    return unloaded
