"""Outbound control messages for the AC and DC output switches.

Commands are fire-and-forget: the switch state only changes once a later
telemetry message reports the new ``showFlag``.
"""

from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict

from .const import (
    CMD_CODE_AC_OUTPUT,
    CMD_CODE_DC_OUTPUT,
    COMMAND_OFF,
    COMMAND_ON,
    TOPIC_SET,
    EndpointKind,
)
from .endpoints import CommandResult, DeviceEndpoints
from .exceptions import CommandError

_LOGGER = logging.getLogger(__name__)

SWITCH_COMMAND_CODES = {
    EndpointKind.AC_SWITCH: CMD_CODE_AC_OUTPUT,
    EndpointKind.DC_SWITCH: CMD_CODE_DC_OUTPUT,
}


def get_set_topic(account: str, serial_number: str) -> str:
    """Get the control topic for a device."""
    return f"/open/{account}/{serial_number}/{TOPIC_SET}"


def build_set_message(
    serial_number: str,
    cmd_code: str,
    params: Dict[str, Any],
    message_id: int | None = None,
) -> bytes:
    """Build the JSON body of a control message."""
    if message_id is None:
        message_id = random.randint(100000000, 999999999)
    body = {
        "id": message_id,
        "version": "1.0",
        "sn": serial_number,
        "cmdCode": cmd_code,
        "params": params,
    }
    return json.dumps(body).encode()


class SwitchCommands:
    """Translates on/off commands into control messages for one device."""

    def __init__(self, publisher, account: str, serial_number: str) -> None:
        """Initialize with anything exposing ``async_publish(topic, payload)``."""
        self._publisher = publisher
        self.serial_number = serial_number
        self.topic = get_set_topic(account, serial_number)

    def bind(self, device: DeviceEndpoints) -> None:
        """Register on/off handlers on the device's switch endpoints."""
        for kind, cmd_code in SWITCH_COMMAND_CODES.items():
            endpoint = device.get(kind)
            if endpoint is None:
                continue
            endpoint.register_command_handler(
                COMMAND_ON, self._handler(cmd_code, COMMAND_ON, True)
            )
            endpoint.register_command_handler(
                COMMAND_OFF, self._handler(cmd_code, COMMAND_OFF, False)
            )

    def _handler(self, cmd_code: str, command: str, enabled: bool):
        async def handle() -> CommandResult:
            return await self.async_set_output(cmd_code, command, enabled)

        return handle

    async def async_set_output(self, cmd_code: str, command: str, enabled: bool) -> CommandResult:
        """Publish an output enable/disable message."""
        payload = build_set_message(
            self.serial_number, cmd_code, {"enable": 1 if enabled else 0}
        )
        try:
            await self._publisher.async_publish(self.topic, payload)
        except CommandError as err:
            _LOGGER.error(
                "Failed to send %s %s to %s: %s", cmd_code, command, self.serial_number, err
            )
            return CommandResult.failed(command, str(err))

        _LOGGER.info("Sent %s %s to %s", cmd_code, command, self.serial_number)
        return CommandResult.ok(command)
