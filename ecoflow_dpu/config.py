"""Runtime settings and credentials for the bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .const import (
    DEFAULT_LOW_BATTERY_THRESHOLD,
    ECOFLOW_API_HOST,
    ENV_ACCESS_KEY,
    ENV_SECRET_KEY,
)
from .exceptions import ConfigurationError
from .units import VoltagePolicy

CONF_ACCESS_KEY = "access_key"
CONF_SECRET_KEY = "secret_key"
CONF_API_HOST = "api_host"
CONF_LOW_BATTERY_THRESHOLD = "low_battery_threshold"
CONF_VOLTAGE_POLICY = "voltage_policy"
CONF_SOLAR_ENABLED = "solar_enabled"
CONF_UNREGISTER_ON_SHUTDOWN = "unregister_on_shutdown"


@dataclass(frozen=True)
class Credentials:
    """Open platform access/secret key pair."""

    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key[:4]}...)"

    @classmethod
    def from_sources(
        cls,
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> Credentials:
        """Resolve credentials from configuration, then the environment.

        Raises ConfigurationError when either key is missing so the telemetry
        path never starts without a data source.
        """
        if environ is None:
            environ = os.environ

        access_key = config.get(CONF_ACCESS_KEY) or environ.get(ENV_ACCESS_KEY)
        secret_key = config.get(CONF_SECRET_KEY) or environ.get(ENV_SECRET_KEY)

        if not access_key or not secret_key:
            raise ConfigurationError(
                f"Must set {CONF_ACCESS_KEY}/{CONF_SECRET_KEY} or the "
                f"{ENV_ACCESS_KEY} and {ENV_SECRET_KEY} environment variables"
            )
        return cls(access_key=access_key, secret_key=secret_key)


@dataclass(frozen=True)
class BridgeSettings:
    """Behavioral options that differ between product revisions."""

    low_battery_threshold: int = DEFAULT_LOW_BATTERY_THRESHOLD
    voltage_policy: VoltagePolicy = VoltagePolicy.NULL_IF_BOTH_PRESENT
    solar_enabled: bool = False
    unregister_on_shutdown: bool = False
    api_host: str = ECOFLOW_API_HOST

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> BridgeSettings:
        """Build settings from a config entry's options mapping."""
        defaults = cls()
        return cls(
            low_battery_threshold=int(
                options.get(CONF_LOW_BATTERY_THRESHOLD, defaults.low_battery_threshold)
            ),
            voltage_policy=VoltagePolicy(
                options.get(CONF_VOLTAGE_POLICY, defaults.voltage_policy)
            ),
            solar_enabled=bool(options.get(CONF_SOLAR_ENABLED, defaults.solar_enabled)),
            unregister_on_shutdown=bool(
                options.get(CONF_UNREGISTER_ON_SHUTDOWN, defaults.unregister_on_shutdown)
            ),
            api_host=options.get(CONF_API_HOST, defaults.api_host),
        )
