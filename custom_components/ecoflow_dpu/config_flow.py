"""Config flow for EcoFlow DELTA Pro Ultra integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv

from ecoflow_dpu import ApiError, AuthenticationError, Credentials
from ecoflow_dpu.api import CONNECTION_ERRORS, DeviceInfo, EcoflowRestClient
from ecoflow_dpu.platform import is_supported

from .const import (
    CONF_ACCESS_KEY,
    CONF_LOW_BATTERY_THRESHOLD,
    CONF_SECRET_KEY,
    CONF_SOLAR_ENABLED,
    CONF_UNREGISTER_ON_SHUTDOWN,
    CONF_VOLTAGE_POLICY,
    DEFAULT_LOW_BATTERY_THRESHOLD,
    DEFAULT_SOLAR_ENABLED,
    DEFAULT_UNREGISTER_ON_SHUTDOWN,
    DEFAULT_VOLTAGE_POLICY,
    DOMAIN,
    PRODUCT_NAME,
    VOLTAGE_POLICIES,
)

_LOGGER = logging.getLogger(__name__)


async def fetch_devices(access_key: str, secret_key: str) -> list[DeviceInfo]:
    """Fetch the supported devices of the account (validates the keys too)."""
    api = EcoflowRestClient(Credentials(access_key=access_key, secret_key=secret_key))
    try:
        devices = await api.async_get_devices()
    finally:
        # Always close the API session
        await api.close_session()

    return [device for device in devices if is_supported(device)]


class EcoflowFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for the EcoFlow DELTA Pro Ultra integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the step capturing the open platform keys."""
        errors: dict[str, str] = {}

        if user_input is not None:
            access_key = user_input[CONF_ACCESS_KEY]
            await self.async_set_unique_id(access_key)
            self._abort_if_unique_id_configured()

            try:
                devices = await fetch_devices(access_key, user_input[CONF_SECRET_KEY])
            except AuthenticationError as err:
                _LOGGER.error("EcoFlow rejected the access/secret key: %s", err)
                errors["base"] = "auth_failed"
            except (ApiError, *CONNECTION_ERRORS) as err:
                _LOGGER.error("Failed to reach the EcoFlow API: %s", err)
                errors["base"] = "cannot_connect"
            else:
                if not devices:
                    _LOGGER.error("No %s devices found for this account", PRODUCT_NAME)
                    errors["base"] = "no_devices"
                else:
                    return self._create_entry(user_input, devices)

        return self.async_show_form(
            step_id="user",
            data_schema=self._create_schema(),
            errors=errors or None,
        )

    def _create_schema(self) -> vol.Schema:
        """Create the schema for user input."""
        return vol.Schema(
            {
                vol.Required(CONF_ACCESS_KEY): cv.string,
                vol.Required(CONF_SECRET_KEY): cv.string,
            }
        )

    def _create_entry(
        self, user_input: dict[str, Any], devices: list[DeviceInfo]
    ) -> config_entries.ConfigFlowResult:
        """Create the config entry."""
        if len(devices) == 1:
            title = f"{PRODUCT_NAME} ({devices[0].display_name})"
        else:
            title = f"{PRODUCT_NAME} ({len(devices)} devices)"

        return self.async_create_entry(
            title=title,
            data={
                CONF_ACCESS_KEY: user_input[CONF_ACCESS_KEY],
                CONF_SECRET_KEY: user_input[CONF_SECRET_KEY],
            },
            options={
                CONF_LOW_BATTERY_THRESHOLD: DEFAULT_LOW_BATTERY_THRESHOLD,
                CONF_VOLTAGE_POLICY: DEFAULT_VOLTAGE_POLICY,
                CONF_SOLAR_ENABLED: DEFAULT_SOLAR_ENABLED,
                CONF_UNREGISTER_ON_SHUTDOWN: DEFAULT_UNREGISTER_ON_SHUTDOWN,
            },
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> OptionsFlowHandler:
        """Get the options flow for this handler."""
        return OptionsFlowHandler()


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options flow for EcoFlow DELTA Pro Ultra."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        options = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_LOW_BATTERY_THRESHOLD,
                        default=options.get(
                            CONF_LOW_BATTERY_THRESHOLD, DEFAULT_LOW_BATTERY_THRESHOLD
                        ),
                    ): vol.All(vol.Coerce(int), vol.Range(min=0, max=100)),
                    vol.Optional(
                        CONF_VOLTAGE_POLICY,
                        default=options.get(CONF_VOLTAGE_POLICY, DEFAULT_VOLTAGE_POLICY),
                    ): vol.In(VOLTAGE_POLICIES),
                    vol.Optional(
                        CONF_SOLAR_ENABLED,
                        default=options.get(CONF_SOLAR_ENABLED, DEFAULT_SOLAR_ENABLED),
                    ): bool,
                    vol.Optional(
                        CONF_UNREGISTER_ON_SHUTDOWN,
                        default=options.get(
                            CONF_UNREGISTER_ON_SHUTDOWN, DEFAULT_UNREGISTER_ON_SHUTDOWN
                        ),
                    ): bool,
                }
            ),
        )
