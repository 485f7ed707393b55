from typing import Any

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from ecoflow_dpu import DeviceEndpoints, EcoflowBridge, SubEndpoint
from ecoflow_dpu.const import EndpointKind

from .const import DOMAIN, MANUFACTURER


def iter_endpoints(bridge: EcoflowBridge, kind: EndpointKind):
    """Yield (device, endpoint) for every registered device exposing ``kind``."""
    for device in bridge.registry:
        endpoint = device.get(kind)
        if endpoint is not None:
            yield device, endpoint


class EcoflowEntity(Entity):
    """Implementation of the base EcoFlow entity, mirroring one attribute."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    _namespace: str = ""
    _attribute: str = ""

    def __init__(self, device: DeviceEndpoints, endpoint: SubEndpoint) -> None:
        """Initialize the EcoFlow entity."""
        self._device = device
        self._endpoint = endpoint
        self._attr_unique_id = (
            f"{device.serial_number}_{endpoint.kind.value}_{self._attribute}"
        )
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, device.serial_number)},
            manufacturer=MANUFACTURER,
            model=device.product_name,
            name=device.display_name,
            serial_number=device.serial_number,
        )
        self._update_from_value(endpoint.get(self._namespace, self._attribute))

    async def async_added_to_hass(self) -> None:
        """Follow attribute writes on the endpoint."""
        self.async_on_remove(self._endpoint.add_listener(self._handle_attribute_write))

    @callback
    def _handle_attribute_write(self, namespace: str, attribute: str, value: Any) -> None:
        if (namespace, attribute) != (self._namespace, self._attribute):
            return
        self._update_from_value(value)
        self.async_write_ha_state()

    def _update_from_value(self, value: Any) -> None:
        """Store the attribute value on the entity."""
        raise NotImplementedError
