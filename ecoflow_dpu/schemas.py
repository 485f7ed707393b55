"""Payload schemas for EcoFlow DELTA Pro Ultra MQTT and REST payloads.

Inbound quota messages look like::

    {
        "cmdId": 1,
        "cmdFunc": 2,
        "addr": "hs_yj751_pd_appshow_addr",
        "param": {"soc": 40, "inAc5p8Pwr": 120.5, ...}
    }

Every parameter is optional since the device only sends what changed, and
firmware regularly adds keys nobody has mapped yet. Unknown keys are kept in
the ``extra`` bag of the parsed record instead of being rejected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Mapping, Optional

import voluptuous as vol

from .const import (
    ADDR_APP_SET_INFO,
    ADDR_APPSHOW,
    ADDR_BACKEND,
    CMD_ID_APP_SET_INFO,
    CMD_ID_APPSHOW,
    CMD_ID_BACKEND,
)
from .exceptions import PayloadValidationError

# =============================================================================
# PRIMITIVE VALIDATORS
# =============================================================================


def integer(value: Any) -> int:
    """Accept ints and integral floats, reject booleans."""
    if isinstance(value, bool):
        raise vol.Invalid("expected integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise vol.Invalid("expected integer")


def number(value: Any) -> float | int:
    """Accept any finite int or float, reject booleans."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise vol.Invalid("expected number")
    if isinstance(value, float) and not math.isfinite(value):
        raise vol.Invalid("expected finite number")
    return value


def string(value: Any) -> str:
    if not isinstance(value, str):
        raise vol.Invalid("expected string")
    return value


def _param(key: str, validator) -> Any:
    """Declare an optional parameter carried under ``key`` on the wire."""
    return field(default=None, metadata={"key": key, "validator": validator})


def _raise_invalid(err: vol.Invalid, what: str) -> None:
    raise PayloadValidationError(f"Invalid {what}: {err}", list(err.path)) from err


# =============================================================================
# ENVELOPE
# =============================================================================

ENVELOPE_SCHEMA = vol.Schema(
    {
        vol.Required("cmdId"): integer,
        vol.Required("cmdFunc"): integer,
        vol.Required("addr"): string,
        vol.Optional("param"): vol.Schema({str: object}),
    },
    extra=vol.ALLOW_EXTRA,
)


@dataclass
class Envelope:
    """One inbound quota message."""

    cmd_id: int
    cmd_func: int
    addr: str
    param: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


def parse_envelope(data: Any) -> Envelope:
    """Validate a decoded JSON message and return its envelope."""
    try:
        validated = ENVELOPE_SCHEMA(data)
    except vol.Invalid as err:
        _raise_invalid(err, "envelope")

    extra = {
        key: value
        for key, value in validated.items()
        if key not in ("cmdId", "cmdFunc", "addr", "param")
    }
    return Envelope(
        cmd_id=validated["cmdId"],
        cmd_func=validated["cmdFunc"],
        addr=validated["addr"],
        param=dict(validated.get("param") or {}),
        extra=extra,
    )


# =============================================================================
# COMMAND FAMILY PARAMETER SETS
# =============================================================================

_SCHEMA_CACHE: Dict[type, vol.Schema] = {}


@dataclass
class ParamSet:
    """Base record for a command family's parameters."""

    CMD_ID: ClassVar[int] = 0
    ADDR: ClassVar[str] = ""

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def wire_fields(cls) -> Dict[str, Any]:
        """Map wire key -> dataclass field for every declared parameter."""
        return {f.metadata["key"]: f for f in fields(cls) if "key" in f.metadata}

    @classmethod
    def schema(cls) -> vol.Schema:
        if cls not in _SCHEMA_CACHE:
            _SCHEMA_CACHE[cls] = vol.Schema(
                {
                    vol.Optional(key): f.metadata["validator"]
                    for key, f in cls.wire_fields().items()
                },
                extra=vol.ALLOW_EXTRA,
            )
        return _SCHEMA_CACHE[cls]

    @classmethod
    def from_param(cls, param: Optional[Mapping[str, Any]]):
        """Validate a raw parameter map and build the typed record."""
        try:
            validated = cls.schema()(dict(param or {}))
        except vol.Invalid as err:
            _raise_invalid(err, f"cmdId {cls.CMD_ID} parameters")

        known = cls.wire_fields()
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in validated.items():
            if key in known:
                values[known[key].name] = value
            else:
                extra[key] = value
        return cls(extra=extra, **values)

    def present(self) -> Dict[str, Any]:
        """Return the wire keys that carried a value in this message."""
        return {
            key: getattr(self, f.name)
            for key, f in self.wire_fields().items()
            if getattr(self, f.name) is not None
        }


@dataclass
class AppShowParams(ParamSet):
    """cmdId 1: power flow and state, reported by the app display subsystem."""

    CMD_ID: ClassVar[int] = CMD_ID_APPSHOW
    ADDR: ClassVar[str] = ADDR_APPSHOW

    access_5p8_in_type: Optional[int] = _param("access5p8InType", integer)
    access_5p8_out_type: Optional[int] = _param("access5p8OutType", integer)
    bp_num: Optional[int] = _param("bpNum", integer)
    c20_chg_max_watts: Optional[int] = _param("c20ChgMaxWatts", integer)
    chg_time_task_mode: Optional[int] = _param("chgTimeTaskMode", integer)
    chg_time_task_param: Optional[int] = _param("chgTimeTaskParam", integer)
    chg_time_task_table_0: Optional[int] = _param("chgTimeTaskTable0", integer)
    chg_time_task_table_1: Optional[int] = _param("chgTimeTaskTable1", integer)
    chg_time_task_table_2: Optional[int] = _param("chgTimeTaskTable2", integer)
    chg_time_task_type: Optional[int] = _param("chgTimeTaskType", integer)
    dsg_time_task_mode: Optional[int] = _param("dsgTimeTaskMode", integer)
    dsg_time_task_notice: Optional[int] = _param("dsgTimeTaskNotice", integer)
    dsg_time_task_table_0: Optional[int] = _param("dsgTimeTaskTable0", integer)
    dsg_time_task_table_1: Optional[int] = _param("dsgTimeTaskTable1", integer)
    dsg_time_task_table_2: Optional[int] = _param("dsgTimeTaskTable2", integer)
    dsg_time_task_type: Optional[int] = _param("dsgTimeTaskType", integer)
    full_combo: Optional[int] = _param("fullCombo", integer)

    # AC inputs: 5.8kW port and 20A-breaker port
    in_ac_5p8_pwr: Optional[float] = _param("inAc5p8Pwr", number)
    in_ac_c20_pwr: Optional[float] = _param("inAcC20Pwr", number)

    # Solar inputs
    in_hv_mppt_pwr: Optional[float] = _param("inHvMpptPwr", number)
    in_lv_mppt_pwr: Optional[float] = _param("inLvMpptPwr", number)

    # AC outputs
    out_ac_5p8_pwr: Optional[float] = _param("outAc5p8Pwr", number)
    out_ac_l11_pwr: Optional[float] = _param("outAcL11Pwr", number)
    out_ac_l12_pwr: Optional[float] = _param("outAcL12Pwr", number)
    out_ac_l14_pwr: Optional[float] = _param("outAcL14Pwr", number)
    out_ac_l21_pwr: Optional[float] = _param("outAcL21Pwr", number)
    out_ac_l22_pwr: Optional[float] = _param("outAcL22Pwr", number)
    out_ac_tt_pwr: Optional[float] = _param("outAcTtPwr", number)

    # DC outputs
    out_ads_pwr: Optional[float] = _param("outAdsPwr", number)
    out_typec1_pwr: Optional[float] = _param("outTypec1Pwr", number)
    out_typec2_pwr: Optional[float] = _param("outTypec2Pwr", number)
    out_usb1_pwr: Optional[float] = _param("outUsb1Pwr", number)
    out_usb2_pwr: Optional[float] = _param("outUsb2Pwr", number)
    out_pr_pwr: Optional[float] = _param("outPrPwr", number)

    para_chg_max_watts: Optional[int] = _param("paraChgMaxWatts", integer)
    remain_combo: Optional[int] = _param("remainCombo", integer)
    remain_time: Optional[int] = _param("remainTime", integer)
    show_flag: Optional[int] = _param("showFlag", integer)
    soc: Optional[int] = _param("soc", integer)
    sys_err_code: Optional[int] = _param("sysErrCode", integer)
    watts_in_sum: Optional[float] = _param("wattsInSum", number)
    watts_out_sum: Optional[float] = _param("wattsOutSum", number)
    wireless_4g_err_code: Optional[int] = _param("wirlesss4gErrCode", integer)
    wireless_4g_sta: Optional[int] = _param("wireless4GSta", integer)
    wireless_4g_con: Optional[int] = _param("wireless4gCon", integer)
    wireless_4g_on: Optional[int] = _param("wireless4gOn", integer)

    @property
    def ac_input_legs(self) -> tuple:
        return (self.in_ac_5p8_pwr, self.in_ac_c20_pwr)

    @property
    def solar_legs(self) -> tuple:
        return (self.in_hv_mppt_pwr, self.in_lv_mppt_pwr)

    @property
    def ac_output_legs(self) -> tuple:
        return (
            self.out_ac_5p8_pwr,
            self.out_ac_l11_pwr,
            self.out_ac_l12_pwr,
            self.out_ac_l14_pwr,
            self.out_ac_l21_pwr,
            self.out_ac_l22_pwr,
            self.out_ac_tt_pwr,
        )

    @property
    def dc_output_legs(self) -> tuple:
        return (
            self.out_ads_pwr,
            self.out_typec1_pwr,
            self.out_typec2_pwr,
            self.out_usb1_pwr,
            self.out_usb2_pwr,
        )


@dataclass
class BackendParams(ParamSet):
    """cmdId 2: electrical detail and BMS power, reported by the backend."""

    CMD_ID: ClassVar[int] = CMD_ID_BACKEND
    ADDR: ClassVar[str] = ADDR_BACKEND

    ac_out_freq: Optional[int] = _param("acOutFreq", integer)
    bms_input_watts: Optional[float] = _param("bmsInputWatts", number)
    bms_output_watts: Optional[float] = _param("bmsOutputWatts", number)

    in_ac_5p8_amp: Optional[float] = _param("inAc5p8Amp", number)
    in_ac_5p8_vol: Optional[float] = _param("inAc5p8Vol", number)
    in_ac_c20_amp: Optional[float] = _param("inAcC20Amp", number)
    in_ac_c20_vol: Optional[float] = _param("inAcC20Vol", number)
    in_hv_mppt_amp: Optional[float] = _param("inHvMpptAmp", number)
    in_hv_mppt_vol: Optional[float] = _param("inHvMpptVol", number)
    in_lv_mppt_amp: Optional[float] = _param("inLvMpptAmp", number)
    in_lv_mppt_vol: Optional[float] = _param("inLvMpptVol", number)

    out_ac_5p8_amp: Optional[float] = _param("outAc5p8Amp", number)
    out_ac_5p8_vol: Optional[float] = _param("outAc5p8Vol", number)
    out_ac_p58_pf: Optional[float] = _param("outAcP58Pf", number)
    out_ac_l11_pf: Optional[float] = _param("outAcL11Pf", number)
    out_ac_l12_amp: Optional[float] = _param("outAcL12Amp", number)
    out_ac_l12_pf: Optional[float] = _param("outAcL12Pf", number)
    out_ac_l14_amp: Optional[float] = _param("outAcL14Amp", number)
    out_ac_l14_pf: Optional[float] = _param("outAcL14Pf", number)
    out_ac_l14_vol: Optional[float] = _param("outAcL14Vol", number)
    out_ac_l21_amp: Optional[float] = _param("outAcL21Amp", number)
    out_ac_l21_pf: Optional[float] = _param("outAcL21Pf", number)
    out_ac_l21_vol: Optional[float] = _param("outAcL21Vol", number)
    out_ac_l22_amp: Optional[float] = _param("outAcL22Amp", number)
    out_ac_l22_pf: Optional[float] = _param("outAcL22Pf", number)
    out_ac_l22_vol: Optional[float] = _param("outAcL22Vol", number)
    out_ac_tt_amp: Optional[float] = _param("outAcTtAmp", number)
    out_ac_tt_pf: Optional[float] = _param("outAcTtPf", number)
    out_ac_tt_vol: Optional[float] = _param("outAcTtVol", number)


@dataclass
class AppSetInfoParams(ParamSet):
    """cmdId 3: echo of the device configuration."""

    CMD_ID: ClassVar[int] = CMD_ID_APP_SET_INFO
    ADDR: ClassVar[str] = ADDR_APP_SET_INFO

    ac_often_open_flg: Optional[int] = _param("acOftenOpenFlg", integer)
    ac_often_open_min_soc: Optional[int] = _param("acOftenOpenMinSoc", integer)
    ac_out_freq: Optional[int] = _param("acOutFreq", integer)
    ac_standby_mins: Optional[int] = _param("acStandbyMins", integer)
    backup_ratio: Optional[int] = _param("backupRatio", integer)
    bms_mode_set: Optional[int] = _param("bmsModeSet", integer)
    chg_5p8_set_watts: Optional[int] = _param("chg5p8SetWatts", integer)
    chg_c20_set_watts: Optional[int] = _param("chgC20SetWatts", integer)
    chg_max_soc: Optional[int] = _param("chgMaxSoc", integer)
    dc_standby_mins: Optional[int] = _param("dcStandbyMins", integer)
    dsg_min_soc: Optional[int] = _param("dsgMinSoc", integer)
    energy_manage_enable: Optional[int] = _param("energyMamageEnable", integer)
    power_standby_mins: Optional[int] = _param("powerStandbyMins", integer)
    screen_standby_sec: Optional[int] = _param("screenStandbySec", integer)
    sys_backup_soc: Optional[int] = _param("sysBackupSoc", integer)
    sys_timezone: Optional[int] = _param("sysTimezone", integer)
    sys_timezone_id: Optional[str] = _param("sysTimezoneId", string)
    sys_word_mode: Optional[int] = _param("sysWordMode", integer)
    timezone_settype: Optional[int] = _param("timezoneSettype", integer)


PARAM_SETS: Dict[int, type] = {
    cls.CMD_ID: cls for cls in (AppShowParams, BackendParams, AppSetInfoParams)
}

# =============================================================================
# BASELINE SNAPSHOT
# =============================================================================

BASELINE_FAMILIES = (AppShowParams, BackendParams)

BASELINE_SCHEMA = vol.Schema(
    {
        vol.Optional(f"{cls.ADDR}.{key}"): f.metadata["validator"]
        for cls in BASELINE_FAMILIES
        for key, f in cls.wire_fields().items()
    },
    extra=vol.ALLOW_EXTRA,
)


def parse_baseline(data: Any) -> Dict[str, Any]:
    """Validate the one-shot ``quota/all`` property map."""
    try:
        return dict(BASELINE_SCHEMA(data))
    except vol.Invalid as err:
        _raise_invalid(err, "baseline snapshot")


def baseline_params(snapshot: Mapping[str, Any], cls):
    """Build a family record from the ``<addr>.<field>`` keys of a snapshot."""
    prefix = f"{cls.ADDR}."
    known = cls.wire_fields()
    param = {
        key[len(prefix):]: value
        for key, value in snapshot.items()
        if key.startswith(prefix) and key[len(prefix):] in known
    }
    return cls.from_param(param)
