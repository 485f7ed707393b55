"""
Unit tests for credential and settings resolution.

Tests verify:
- Credentials come from configuration first, then the environment.
- Missing credentials raise ConfigurationError.
- Secrets do not appear in the credential repr.
- Options map onto BridgeSettings with documented defaults.
"""

from __future__ import annotations

import pytest

from ecoflow_dpu import BridgeSettings, ConfigurationError, Credentials, VoltagePolicy
from ecoflow_dpu.config import (
    CONF_ACCESS_KEY,
    CONF_LOW_BATTERY_THRESHOLD,
    CONF_SECRET_KEY,
    CONF_SOLAR_ENABLED,
    CONF_VOLTAGE_POLICY,
)
from ecoflow_dpu.const import ECOFLOW_API_HOST, ENV_ACCESS_KEY, ENV_SECRET_KEY


class TestCredentials:
    """Credential sources."""

    def test_from_config(self) -> None:
        credentials = Credentials.from_sources(
            {CONF_ACCESS_KEY: "ak", CONF_SECRET_KEY: "sk"}, environ={}
        )
        assert credentials == Credentials("ak", "sk")

    def test_from_environment(self) -> None:
        credentials = Credentials.from_sources(
            {}, environ={ENV_ACCESS_KEY: "env-ak", ENV_SECRET_KEY: "env-sk"}
        )
        assert credentials.access_key == "env-ak"
        assert credentials.secret_key == "env-sk"

    def test_config_wins_over_environment(self) -> None:
        credentials = Credentials.from_sources(
            {CONF_ACCESS_KEY: "ak", CONF_SECRET_KEY: "sk"},
            environ={ENV_ACCESS_KEY: "env-ak", ENV_SECRET_KEY: "env-sk"},
        )
        assert credentials.access_key == "ak"

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_ACCESS_KEY, "proc-ak")
        monkeypatch.setenv(ENV_SECRET_KEY, "proc-sk")

        assert Credentials.from_sources({}).access_key == "proc-ak"

    @pytest.mark.parametrize(
        "config",
        [{}, {CONF_ACCESS_KEY: "ak"}, {CONF_SECRET_KEY: "sk"}, {CONF_ACCESS_KEY: "", CONF_SECRET_KEY: "sk"}],
    )
    def test_missing_credentials(self, config) -> None:
        with pytest.raises(ConfigurationError):
            Credentials.from_sources(config, environ={})

    def test_repr_hides_secret(self) -> None:
        text = repr(Credentials("abcdefgh", "topsecret"))
        assert "topsecret" not in text
        assert "efgh" not in text


class TestBridgeSettings:
    """Options mapping."""

    def test_defaults(self) -> None:
        settings = BridgeSettings.from_options({})
        assert settings.low_battery_threshold == 10
        assert settings.voltage_policy is VoltagePolicy.NULL_IF_BOTH_PRESENT
        assert settings.solar_enabled is False
        assert settings.unregister_on_shutdown is False
        assert settings.api_host == ECOFLOW_API_HOST

    def test_from_options(self) -> None:
        settings = BridgeSettings.from_options(
            {
                CONF_LOW_BATTERY_THRESHOLD: "25",
                CONF_VOLTAGE_POLICY: "average_if_both_present",
                CONF_SOLAR_ENABLED: True,
            }
        )
        assert settings.low_battery_threshold == 25
        assert settings.voltage_policy is VoltagePolicy.AVERAGE_IF_BOTH_PRESENT
        assert settings.solar_enabled is True

    def test_invalid_policy(self) -> None:
        with pytest.raises(ValueError):
            BridgeSettings.from_options({CONF_VOLTAGE_POLICY: "median"})
