"""Switch platform for EcoFlow DELTA Pro Ultra outputs."""

import logging
from typing import Any

from homeassistant.components.switch import SwitchDeviceClass, SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ecoflow_dpu.const import (
    ATTR_ON_OFF,
    COMMAND_OFF,
    COMMAND_ON,
    NS_ON_OFF,
    EndpointKind,
)

from .entity import EcoflowEntity, iter_endpoints

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up EcoFlow output switches based on a config entry."""
    bridge = entry.runtime_data

    entities = []
    for switch_cls in (AcOutputSwitch, DcOutputSwitch):
        for device, endpoint in iter_endpoints(bridge, switch_cls._endpoint_kind):
            entities.append(switch_cls(device, endpoint))

    async_add_entities(entities)


class EcoflowOutputSwitch(EcoflowEntity, SwitchEntity):
    """Output switch; the state follows telemetry, not the command."""

    _attr_device_class = SwitchDeviceClass.OUTLET
    _endpoint_kind: EndpointKind
    _namespace = NS_ON_OFF
    _attribute = ATTR_ON_OFF

    def _update_from_value(self, value: Any) -> None:
        self._attr_is_on = value

    async def _async_send(self, command: str) -> None:
        result = await self._endpoint.async_invoke(command)
        if not result.success:
            raise HomeAssistantError(
                f"Could not turn {command} {self.name}: {result.error}"
            )

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the output on."""
        await self._async_send(COMMAND_ON)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the output off."""
        await self._async_send(COMMAND_OFF)


class AcOutputSwitch(EcoflowOutputSwitch):
    """AC output switch."""

    _attr_name = "AC output"
    _attr_icon = "mdi:power-socket"
    _endpoint_kind = EndpointKind.AC_SWITCH


class DcOutputSwitch(EcoflowOutputSwitch):
    """DC output switch."""

    _attr_name = "DC output"
    _attr_icon = "mdi:usb-port"
    _endpoint_kind = EndpointKind.DC_SWITCH
