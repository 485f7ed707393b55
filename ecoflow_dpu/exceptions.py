"""Exceptions raised by the EcoFlow DELTA Pro Ultra bridge."""


class EcoflowError(Exception):
    """Base class for all bridge errors."""


class AuthenticationError(EcoflowError):
    """Raised when the open platform rejects the access/secret key pair."""


class ApiError(EcoflowError):
    """Raised when a REST call fails or returns an unexpected payload."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(EcoflowError):
    """Raised when required configuration (credentials) is missing."""


class PayloadValidationError(EcoflowError):
    """Raised when an inbound payload does not match its schema."""

    def __init__(self, message: str, path: list | None = None) -> None:
        super().__init__(message)
        self.path = path or []


class UnknownAttributeError(EcoflowError):
    """Raised when writing an attribute a sub-endpoint does not expose."""


class CommandError(EcoflowError):
    """Raised when an outbound control message cannot be published."""
