"""
Shared test fixtures for the EcoFlow DELTA Pro Ultra bridge tests.

Provides a registered device with the full endpoint set (solar included),
the projector/router pair wired to it, and helpers to build MQTT payloads.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from ecoflow_dpu import (
    AttributeProjector,
    BridgeSettings,
    DeviceEndpoints,
    DeviceRegistry,
    TelemetryRouter,
)
from ecoflow_dpu.const import (
    ADDR_APP_SET_INFO,
    ADDR_APPSHOW,
    ADDR_BACKEND,
    ENV_ACCESS_KEY,
    ENV_SECRET_KEY,
    EndpointKind,
)

SERIAL = "Y711ZAB5ZH000001"
ACCOUNT = "open-abc123"

ADDRESSES = {
    1: ADDR_APPSHOW,
    2: ADDR_BACKEND,
    3: ADDR_APP_SET_INFO,
}


def quota_topic(serial_number: str = SERIAL) -> str:
    """Return the telemetry topic for a device."""
    return f"/open/{ACCOUNT}/{serial_number}/quota"


def make_message(cmd_id: int, param: dict[str, Any], addr: str | None = None) -> bytes:
    """Return an encoded quota message for a command family."""
    return json.dumps(
        {
            "cmdId": cmd_id,
            "cmdFunc": 2,
            "addr": addr if addr is not None else ADDRESSES.get(cmd_id, "unknown_addr"),
            "param": param,
        }
    ).encode()


@pytest.fixture(autouse=True)
def _clean_ecoflow_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials in the environment out of the tests."""
    monkeypatch.delenv(ENV_ACCESS_KEY, raising=False)
    monkeypatch.delenv(ENV_SECRET_KEY, raising=False)


@pytest.fixture()
def settings() -> BridgeSettings:
    return BridgeSettings(solar_enabled=True)


@pytest.fixture()
def device() -> DeviceEndpoints:
    """A device exposing every endpoint kind, solar included."""
    return DeviceEndpoints.build(
        SERIAL, "DELTA Pro Ultra", "Garage DPU", list(EndpointKind)
    )


@pytest.fixture()
def projector(settings: BridgeSettings) -> AttributeProjector:
    return AttributeProjector(settings)


@pytest.fixture()
def registry(device: DeviceEndpoints) -> DeviceRegistry:
    registry = DeviceRegistry()
    registry.register(SERIAL, device)
    return registry


@pytest.fixture()
def router(registry: DeviceRegistry, projector: AttributeProjector) -> TelemetryRouter:
    return TelemetryRouter(registry, projector)
