"""
Tests for the Home Assistant entry setup and config flow error mapping.

Skipped unless Home Assistant is installed.

Tests verify:
- API errors and request timeouts during startup raise ConfigEntryNotReady.
- Request timeouts in the config flow show the cannot_connect error.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

pytest.importorskip("homeassistant")

from homeassistant.exceptions import ConfigEntryNotReady  # noqa: E402

from custom_components.ecoflow_dpu import async_setup_entry  # noqa: E402
from custom_components.ecoflow_dpu.config_flow import EcoflowFlowHandler  # noqa: E402
from custom_components.ecoflow_dpu.const import CONF_ACCESS_KEY, CONF_SECRET_KEY  # noqa: E402
from ecoflow_dpu import ApiError  # noqa: E402


def _failing_bridge(error: Exception) -> MagicMock:
    bridge = MagicMock()
    bridge.async_start = AsyncMock(side_effect=error)
    bridge.async_stop = AsyncMock()
    return bridge


class TestSetupEntry:
    """Startup failures that should be retried later."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [asyncio.TimeoutError(), ApiError("quota failed")])
    async def test_not_ready(self, error: Exception) -> None:
        bridge = _failing_bridge(error)

        with patch(
            "custom_components.ecoflow_dpu.EcoflowBridge.from_config", return_value=bridge
        ):
            with pytest.raises(ConfigEntryNotReady):
                await async_setup_entry(MagicMock(), MagicMock())

        bridge.async_stop.assert_awaited_once()


class TestConfigFlow:
    """Key validation errors shown on the form."""

    @pytest.mark.asyncio
    async def test_timeout_shows_cannot_connect(self) -> None:
        flow = EcoflowFlowHandler()
        flow.async_set_unique_id = AsyncMock()
        flow._abort_if_unique_id_configured = MagicMock()
        flow.async_show_form = MagicMock(side_effect=lambda **kwargs: kwargs)

        with patch(
            "custom_components.ecoflow_dpu.config_flow.fetch_devices",
            new=AsyncMock(side_effect=asyncio.TimeoutError()),
        ):
            result = await flow.async_step_user(
                {CONF_ACCESS_KEY: "ak", CONF_SECRET_KEY: "sk"}
            )

        assert result["errors"] == {"base": "cannot_connect"}
