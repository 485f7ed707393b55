"""Sub-endpoints exposed for each device and their attribute storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple

from .const import ENDPOINT_ATTRIBUTES, EndpointKind
from .exceptions import UnknownAttributeError

_LOGGER = logging.getLogger(__name__)

AttributeKey = Tuple[str, str]
AttributeListener = Callable[[str, str, Any], None]


@dataclass
class CommandResult:
    """Outcome of a command handler: success, or a failure with its reason."""

    success: bool
    command: str
    error: Optional[str] = None

    @classmethod
    def ok(cls, command: str) -> CommandResult:
        return cls(success=True, command=command)

    @classmethod
    def failed(cls, command: str, error: str) -> CommandResult:
        return cls(success=False, command=command, error=error)


CommandHandler = Callable[[], Awaitable[CommandResult]]


class SubEndpoint:
    """A named logical unit of a device with a fixed attribute set."""

    def __init__(self, serial_number: str, kind: EndpointKind) -> None:
        """Initialize the endpoint with every attribute unset."""
        self.serial_number = serial_number
        self.kind = kind
        self._values: Dict[AttributeKey, Any] = {
            key: None for key in ENDPOINT_ATTRIBUTES[kind]
        }
        self._listeners: List[AttributeListener] = []
        self._command_handlers: Dict[str, CommandHandler] = {}

    def __repr__(self) -> str:
        return f"<SubEndpoint {self.serial_number}/{self.kind.value}>"

    @property
    def attributes(self) -> frozenset:
        return frozenset(self._values)

    def get(self, namespace: str, attribute: str) -> Any:
        """Return the current value of an attribute."""
        return self._values[self._key(namespace, attribute)]

    def _key(self, namespace: str, attribute: str) -> AttributeKey:
        key = (namespace, attribute)
        if key not in self._values:
            raise UnknownAttributeError(
                f"{self.kind.value} has no attribute {namespace}.{attribute}"
            )
        return key

    def set_initial(self, namespace: str, attribute: str, value: Any) -> None:
        """Seed an attribute before the endpoint is published."""
        self._values[self._key(namespace, attribute)] = value

    async def async_set_attribute(self, namespace: str, attribute: str, value: Any) -> None:
        """Write an attribute and notify listeners."""
        key = self._key(namespace, attribute)
        self._values[key] = value
        for listener in list(self._listeners):
            listener(namespace, attribute, value)

    def add_listener(self, listener: AttributeListener) -> Callable[[], None]:
        """Register a listener for attribute writes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def register_command_handler(self, command: str, handler: CommandHandler) -> None:
        self._command_handlers[command] = handler

    async def async_invoke(self, command: str) -> CommandResult:
        """Run a registered command handler."""
        handler = self._command_handlers.get(command)
        if handler is None:
            _LOGGER.warning("%r has no handler for command %s", self, command)
            return CommandResult.failed(command, "no handler registered")
        return await handler()


@dataclass
class DeviceEndpoints:
    """Endpoint handle for one device: identity plus its sub-endpoints."""

    serial_number: str
    product_name: str
    display_name: str
    endpoints: Dict[EndpointKind, SubEndpoint] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        serial_number: str,
        product_name: str,
        display_name: str,
        kinds: Optional[List[EndpointKind]] = None,
    ) -> DeviceEndpoints:
        """Create a device with one sub-endpoint per requested kind."""
        if kinds is None:
            kinds = [kind for kind in EndpointKind if kind is not EndpointKind.SOLAR]
        return cls(
            serial_number=serial_number,
            product_name=product_name,
            display_name=display_name,
            endpoints={kind: SubEndpoint(serial_number, kind) for kind in kinds},
        )

    def get(self, kind: EndpointKind) -> Optional[SubEndpoint]:
        return self.endpoints.get(kind)

    def __iter__(self) -> Iterator[SubEndpoint]:
        return iter(self.endpoints.values())
