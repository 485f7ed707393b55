"""Telemetry bridge for the EcoFlow DELTA Pro Ultra."""

from .config import BridgeSettings, Credentials
from .endpoints import CommandResult, DeviceEndpoints, SubEndpoint
from .exceptions import (
    ApiError,
    AuthenticationError,
    CommandError,
    ConfigurationError,
    EcoflowError,
    PayloadValidationError,
    UnknownAttributeError,
)
from .platform import EcoflowBridge
from .projector import AttributeProjector, AttributeUpdate
from .registry import DeviceRegistry
from .router import TelemetryRouter
from .units import VoltagePolicy

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AttributeProjector",
    "AttributeUpdate",
    "AuthenticationError",
    "BridgeSettings",
    "CommandError",
    "CommandResult",
    "ConfigurationError",
    "Credentials",
    "DeviceEndpoints",
    "DeviceRegistry",
    "EcoflowBridge",
    "EcoflowError",
    "PayloadValidationError",
    "SubEndpoint",
    "TelemetryRouter",
    "UnknownAttributeError",
    "VoltagePolicy",
]
