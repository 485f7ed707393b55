"""Classification and dispatch of inbound MQTT messages."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Tuple

from .const import TOPIC_QUOTA, TOPIC_SERIAL_INDEX, TOPIC_STATUS
from .exceptions import PayloadValidationError
from .projector import AttributeProjector
from .registry import DeviceRegistry
from .schemas import PARAM_SETS, AppSetInfoParams, parse_envelope

_LOGGER = logging.getLogger(__name__)


def parse_topic(topic: str) -> Optional[Tuple[str, str]]:
    """Split ``/open/{account}/{sn}/{quota|status}`` into (serial, kind)."""
    parts = topic.split("/")
    if len(parts) != TOPIC_SERIAL_INDEX + 2 or parts[1] != "open":
        return None
    serial_number, kind = parts[TOPIC_SERIAL_INDEX], parts[TOPIC_SERIAL_INDEX + 1]
    if not serial_number:
        return None
    return serial_number, kind


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _raw_cmd_id(data: Any) -> Any:
    if isinstance(data, dict):
        return data.get("cmdId")
    return None


class TelemetryRouter:
    """Routes each message to the projection rules for its command family."""

    def __init__(self, registry: DeviceRegistry, projector: AttributeProjector) -> None:
        self.registry = registry
        self.projector = projector

    async def async_handle_message(self, topic: str, payload: bytes) -> None:
        """Handle one message to completion; never raises for bad input."""
        parsed = parse_topic(topic)
        if parsed is None:
            _LOGGER.debug("Ignoring message on unexpected topic %s", topic)
            return

        serial_number, kind = parsed
        device = self.registry.lookup(serial_number)
        if device is None:
            # Other devices on the same account share the topic namespace
            return

        try:
            data = json.loads(payload, parse_constant=_reject_constant)
        except (TypeError, ValueError) as err:
            _LOGGER.warning("Dropping undecodable message on %s: %s", topic, err)
            return

        if kind == TOPIC_STATUS:
            self._handle_status(serial_number, data)
            return
        if kind != TOPIC_QUOTA:
            _LOGGER.debug("Ignoring %s message for %s", kind, serial_number)
            return

        try:
            envelope = parse_envelope(data)
        except PayloadValidationError as err:
            _LOGGER.warning(
                "Dropping malformed message on %s (cmdId=%s): %s",
                topic,
                _raw_cmd_id(data),
                err,
            )
            return

        param_set = PARAM_SETS.get(envelope.cmd_id)
        if param_set is None:
            _LOGGER.info(
                "Unhandled cmdId %s (cmdFunc=%s, addr=%s) for %s",
                envelope.cmd_id,
                envelope.cmd_func,
                envelope.addr,
                serial_number,
            )
            return

        if envelope.addr != param_set.ADDR:
            _LOGGER.debug(
                "cmdId %s arrived from %s, expected %s",
                envelope.cmd_id,
                envelope.addr,
                param_set.ADDR,
            )

        try:
            params = param_set.from_param(envelope.param)
        except PayloadValidationError as err:
            _LOGGER.warning(
                "Dropping cmdId %s message on %s: %s", envelope.cmd_id, topic, err
            )
            return

        if params.extra:
            _LOGGER.debug(
                "cmdId %s carried unmapped fields: %s",
                envelope.cmd_id,
                ", ".join(sorted(params.extra)),
            )

        if isinstance(params, AppSetInfoParams):
            # Configuration echo, nothing is projected from it
            _LOGGER.debug("Settings of %s: %s", serial_number, params.present())
            return

        await self.projector.async_project(params, device)

    def _handle_status(self, serial_number: str, data: Any) -> None:
        online = None
        if isinstance(data, dict) and isinstance(data.get("params"), dict):
            online = data["params"].get("status")
        _LOGGER.debug("Device %s reported online status %s", serial_number, online)
