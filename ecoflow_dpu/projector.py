"""Projection of validated telemetry onto sub-endpoint attributes.

Each rule is guarded independently: it fires only when every field it needs
is present in the current message and the target sub-endpoint exists. Nothing
is buffered between messages, so a field missing from a message leaves its
attribute untouched until a later message carries it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

from .config import BridgeSettings
from .const import (
    ATTR_ACTIVE_CURRENT,
    ATTR_ACTIVE_POWER,
    ATTR_BAT_CHARGE_LEVEL,
    ATTR_BAT_CHARGE_STATE,
    ATTR_BAT_PERCENT_REMAINING,
    ATTR_BAT_TIME_REMAINING,
    ATTR_ON_OFF,
    ATTR_STATUS,
    ATTR_VOLTAGE,
    NS_ELECTRICAL_POWER,
    NS_ON_OFF,
    NS_POWER_SOURCE,
    ChargeLevel,
    ChargeState,
    EndpointKind,
    PowerSourceStatus,
)
from .endpoints import DeviceEndpoints, SubEndpoint
from .schemas import (
    BASELINE_FAMILIES,
    AppShowParams,
    BackendParams,
    ParamSet,
    baseline_params,
)
from .units import any_present, decode_show_flags, select_leg, sum_legs, to_milli

_LOGGER = logging.getLogger(__name__)


@dataclass
class AttributeUpdate:
    """A single attribute write derived from one message."""

    endpoint: SubEndpoint
    namespace: str
    attribute: str
    value: Any


def _active_or_standby(watts) -> PowerSourceStatus:
    return PowerSourceStatus.ACTIVE if watts > 0 else PowerSourceStatus.STANDBY


class AttributeProjector:
    """Computes and applies attribute writes for each command family."""

    def __init__(self, settings: BridgeSettings | None = None) -> None:
        self.settings = settings or BridgeSettings()

    # -------------------------------------------------------------------------
    # Computation
    # -------------------------------------------------------------------------

    def compute(self, params: ParamSet, device: DeviceEndpoints) -> List[AttributeUpdate]:
        """Return the writes a parameter set produces for a device."""
        updates: List[AttributeUpdate] = []

        def emit(kind: EndpointKind, namespace: str, attribute: str, value: Any) -> None:
            endpoint = device.get(kind)
            if endpoint is not None:
                updates.append(AttributeUpdate(endpoint, namespace, attribute, value))

        if isinstance(params, AppShowParams):
            self._project_appshow(params, emit)
        elif isinstance(params, BackendParams):
            self._project_backend(params, emit)

        return updates

    def _project_appshow(self, params: AppShowParams, emit) -> None:
        if params.soc is not None:
            # soc is half of the published percent scale
            emit(EndpointKind.BATTERY, NS_POWER_SOURCE, ATTR_BAT_PERCENT_REMAINING, params.soc * 2)
            level = (
                ChargeLevel.OK
                if params.soc > self.settings.low_battery_threshold
                else ChargeLevel.WARNING
            )
            emit(EndpointKind.BATTERY, NS_POWER_SOURCE, ATTR_BAT_CHARGE_LEVEL, level)

        if params.remain_time is not None and params.watts_in_sum is not None:
            # Remaining time only means something while discharging
            seconds = params.remain_time * 60 if params.watts_in_sum == 0 else None
            emit(EndpointKind.BATTERY, NS_POWER_SOURCE, ATTR_BAT_TIME_REMAINING, seconds)

        if any_present(*params.ac_input_legs):
            grid_live = any(leg is not None and leg > 0 for leg in params.ac_input_legs)
            emit(
                EndpointKind.GRID,
                NS_POWER_SOURCE,
                ATTR_STATUS,
                PowerSourceStatus.ACTIVE if grid_live else PowerSourceStatus.STANDBY,
            )
            emit(
                EndpointKind.AC_INPUT,
                NS_ELECTRICAL_POWER,
                ATTR_ACTIVE_POWER,
                to_milli(sum_legs(*params.ac_input_legs)),
            )

        if any_present(*params.solar_legs):
            solar_watts = sum_legs(*params.solar_legs)
            emit(EndpointKind.SOLAR, NS_POWER_SOURCE, ATTR_STATUS, _active_or_standby(solar_watts))
            emit(EndpointKind.SOLAR, NS_ELECTRICAL_POWER, ATTR_ACTIVE_POWER, to_milli(solar_watts))

        if any_present(*params.ac_output_legs):
            emit(
                EndpointKind.AC_OUTPUT,
                NS_ELECTRICAL_POWER,
                ATTR_ACTIVE_POWER,
                to_milli(sum_legs(*params.ac_output_legs)),
            )

        if any_present(*params.dc_output_legs):
            emit(
                EndpointKind.DC_OUTPUT,
                NS_ELECTRICAL_POWER,
                ATTR_ACTIVE_POWER,
                to_milli(sum_legs(*params.dc_output_legs)),
            )

        if params.show_flag is not None:
            ac_on, dc_on = decode_show_flags(params.show_flag)
            emit(EndpointKind.AC_SWITCH, NS_ON_OFF, ATTR_ON_OFF, ac_on)
            emit(EndpointKind.DC_SWITCH, NS_ON_OFF, ATTR_ON_OFF, dc_on)

    def _project_backend(self, params: BackendParams, emit) -> None:
        if params.bms_input_watts is not None:
            state = (
                ChargeState.IS_CHARGING
                if params.bms_input_watts > 0
                else ChargeState.IS_NOT_CHARGING
            )
            emit(EndpointKind.BATTERY, NS_POWER_SOURCE, ATTR_BAT_CHARGE_STATE, state)

        if params.bms_output_watts is not None:
            emit(
                EndpointKind.BATTERY,
                NS_POWER_SOURCE,
                ATTR_STATUS,
                _active_or_standby(params.bms_output_watts),
            )

        if params.in_ac_5p8_amp is not None and params.in_ac_c20_amp is not None:
            emit(
                EndpointKind.AC_INPUT,
                NS_ELECTRICAL_POWER,
                ATTR_ACTIVE_CURRENT,
                to_milli(sum_legs(params.in_ac_5p8_amp, params.in_ac_c20_amp)),
            )

        if params.in_ac_5p8_vol is not None and params.in_ac_c20_vol is not None:
            volts = select_leg(
                params.in_ac_5p8_vol, params.in_ac_c20_vol, self.settings.voltage_policy
            )
            emit(EndpointKind.AC_INPUT, NS_ELECTRICAL_POWER, ATTR_VOLTAGE, to_milli(volts))

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    async def async_apply(self, updates: List[AttributeUpdate]) -> int:
        """Write every update; a failed write does not stop the others.

        Returns the number of successful writes.
        """
        written = 0
        for update in updates:
            try:
                await update.endpoint.async_set_attribute(
                    update.namespace, update.attribute, update.value
                )
            except Exception as err:
                _LOGGER.error(
                    "Failed to write %s.%s=%s on %r: %s",
                    update.namespace,
                    update.attribute,
                    update.value,
                    update.endpoint,
                    err,
                )
            else:
                written += 1
        return written

    async def async_project(self, params: ParamSet, device: DeviceEndpoints) -> int:
        """Compute and apply the writes for one message."""
        updates = self.compute(params, device)
        _LOGGER.debug(
            "cmdId %s for %s produced %d attribute updates",
            params.CMD_ID,
            device.serial_number,
            len(updates),
        )
        return await self.async_apply(updates)

    def seed_from_baseline(self, snapshot: Mapping[str, Any], device: DeviceEndpoints) -> int:
        """Initialize attribute values from the REST baseline snapshot.

        Runs the snapshot through the same rules as live telemetry. Returns the
        number of attributes seeded.
        """
        seeded = 0
        for family in BASELINE_FAMILIES:
            params = baseline_params(snapshot, family)
            for update in self.compute(params, device):
                update.endpoint.set_initial(update.namespace, update.attribute, update.value)
                seeded += 1
        return seeded
