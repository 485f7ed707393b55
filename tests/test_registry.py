"""
Unit tests for the device registry and sub-endpoints.

Tests verify:
- Registration is idempotent and keeps the first handle.
- Sub-endpoints expose a fixed attribute set.
- Attribute writes notify listeners until they unsubscribe.
- Commands without a handler fail instead of raising.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ecoflow_dpu import (
    CommandResult,
    DeviceEndpoints,
    DeviceRegistry,
    SubEndpoint,
    UnknownAttributeError,
)
from ecoflow_dpu.const import (
    ATTR_ACTIVE_POWER,
    ATTR_BAT_PERCENT_REMAINING,
    ATTR_ON_OFF,
    ATTR_STATUS,
    COMMAND_ON,
    NS_ELECTRICAL_POWER,
    NS_ON_OFF,
    NS_POWER_SOURCE,
    EndpointKind,
)


class TestDeviceRegistry:
    """Serial number to device lookups."""

    def test_register_and_lookup(self) -> None:
        registry = DeviceRegistry()
        device = DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "DPU")

        assert registry.register("SN1", device) is device
        assert registry.lookup("SN1") is device
        assert "SN1" in registry
        assert len(registry) == 1
        assert list(registry) == [device]

    def test_lookup_unknown(self) -> None:
        assert DeviceRegistry().lookup("missing") is None

    def test_register_twice_keeps_first(self) -> None:
        registry = DeviceRegistry()
        first = DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "first")
        second = DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "second")

        registry.register("SN1", first)
        assert registry.register("SN1", second) is first
        assert registry.lookup("SN1") is first
        assert len(registry) == 1

    def test_clear(self) -> None:
        registry = DeviceRegistry()
        registry.register("SN1", DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "DPU"))

        registry.clear()

        assert len(registry) == 0
        assert "SN1" not in registry


class TestDeviceEndpoints:
    """Endpoint set construction."""

    def test_default_kinds_exclude_solar(self) -> None:
        device = DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "DPU")
        assert device.get(EndpointKind.SOLAR) is None
        assert {endpoint.kind for endpoint in device} == set(EndpointKind) - {EndpointKind.SOLAR}

    def test_explicit_kinds(self) -> None:
        device = DeviceEndpoints.build(
            "SN1", "DELTA Pro Ultra", "DPU", [EndpointKind.BATTERY, EndpointKind.SOLAR]
        )
        assert device.get(EndpointKind.SOLAR) is not None
        assert device.get(EndpointKind.GRID) is None


class TestSubEndpoint:
    """Attribute storage and command handlers."""

    def test_attributes_start_unset(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.BATTERY)
        assert endpoint.get(NS_POWER_SOURCE, ATTR_BAT_PERCENT_REMAINING) is None
        assert len(endpoint.attributes) == 5

    def test_unknown_attribute(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.GRID)
        with pytest.raises(UnknownAttributeError):
            endpoint.get(NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER)

    @pytest.mark.asyncio
    async def test_write_unknown_attribute(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.AC_OUTPUT)
        with pytest.raises(UnknownAttributeError):
            await endpoint.async_set_attribute(NS_POWER_SOURCE, ATTR_STATUS, 1)

    @pytest.mark.asyncio
    async def test_listener_notified(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.AC_SWITCH)
        listener = MagicMock()
        remove = endpoint.add_listener(listener)

        await endpoint.async_set_attribute(NS_ON_OFF, ATTR_ON_OFF, True)
        listener.assert_called_once_with(NS_ON_OFF, ATTR_ON_OFF, True)

        remove()
        await endpoint.async_set_attribute(NS_ON_OFF, ATTR_ON_OFF, False)
        listener.assert_called_once()
        assert endpoint.get(NS_ON_OFF, ATTR_ON_OFF) is False

    @pytest.mark.asyncio
    async def test_invoke_handler(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.AC_SWITCH)
        handler = AsyncMock(return_value=CommandResult.ok(COMMAND_ON))
        endpoint.register_command_handler(COMMAND_ON, handler)

        result = await endpoint.async_invoke(COMMAND_ON)

        assert result.success
        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invoke_without_handler(self) -> None:
        endpoint = SubEndpoint("SN1", EndpointKind.DC_SWITCH)

        result = await endpoint.async_invoke(COMMAND_ON)

        assert not result.success
        assert result.error == "no handler registered"
