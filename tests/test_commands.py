"""
Unit tests for the output switch commands.

Tests verify:
- Control messages carry the documented JSON body.
- On/off handlers publish to the device's set topic.
- A failed publish returns a failed CommandResult.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from ecoflow_dpu import CommandError, DeviceEndpoints
from ecoflow_dpu.commands import SwitchCommands, build_set_message, get_set_topic
from ecoflow_dpu.const import (
    CMD_CODE_AC_OUTPUT,
    CMD_CODE_DC_OUTPUT,
    COMMAND_OFF,
    COMMAND_ON,
    EndpointKind,
)


class TestSetMessage:
    """Outbound message layout."""

    def test_topic(self) -> None:
        assert get_set_topic("acct", "SN1") == "/open/acct/SN1/set"

    def test_body(self) -> None:
        body = json.loads(build_set_message("SN1", CMD_CODE_AC_OUTPUT, {"enable": 1}, 123))
        assert body == {
            "id": 123,
            "version": "1.0",
            "sn": "SN1",
            "cmdCode": "YJ751_PD_AC_DSG_SET",
            "params": {"enable": 1},
        }

    def test_random_id(self) -> None:
        body = json.loads(build_set_message("SN1", CMD_CODE_DC_OUTPUT, {"enable": 0}))
        assert isinstance(body["id"], int)


class TestSwitchCommands:
    """Handlers bound to the switch endpoints."""

    @pytest.fixture()
    def publisher(self) -> AsyncMock:
        publisher = AsyncMock()
        publisher.async_publish = AsyncMock()
        return publisher

    @pytest.fixture()
    def device(self, publisher) -> DeviceEndpoints:
        device = DeviceEndpoints.build("SN1", "DELTA Pro Ultra", "DPU")
        SwitchCommands(publisher, "acct", "SN1").bind(device)
        return device

    @pytest.mark.asyncio
    async def test_ac_on(self, device, publisher) -> None:
        result = await device.get(EndpointKind.AC_SWITCH).async_invoke(COMMAND_ON)

        assert result.success
        topic, payload = publisher.async_publish.await_args.args
        assert topic == "/open/acct/SN1/set"
        body = json.loads(payload)
        assert body["cmdCode"] == CMD_CODE_AC_OUTPUT
        assert body["params"] == {"enable": 1}

    @pytest.mark.asyncio
    async def test_dc_off(self, device, publisher) -> None:
        result = await device.get(EndpointKind.DC_SWITCH).async_invoke(COMMAND_OFF)

        assert result.success
        body = json.loads(publisher.async_publish.await_args.args[1])
        assert body["cmdCode"] == CMD_CODE_DC_OUTPUT
        assert body["params"] == {"enable": 0}

    @pytest.mark.asyncio
    async def test_publish_failure(self, device, publisher) -> None:
        publisher.async_publish.side_effect = CommandError("not connected to MQTT")

        result = await device.get(EndpointKind.AC_SWITCH).async_invoke(COMMAND_OFF)

        assert not result.success
        assert result.command == COMMAND_OFF
        assert result.error == "not connected to MQTT"

    @pytest.mark.asyncio
    async def test_no_handlers_on_other_endpoints(self, device) -> None:
        result = await device.get(EndpointKind.BATTERY).async_invoke(COMMAND_ON)
        assert not result.success
