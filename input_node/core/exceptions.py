"""
Global Exception Handling
Custom exceptions raised by the node and inspected by the supervisor.

Every exception carries a stable error code and a details dict so the
entry point can log one structured diagnostic before the process exits.
"""
from typing import Any


class NodeException(Exception):
    """Base exception for the input node."""

    def __init__(
        self,
        message: str = "An error occurred",
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(NodeException):
    """Configuration could not be loaded or validated."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class BindError(NodeException):
    """A local socket could not be bound."""

    def __init__(self, name: str, address: tuple[str, int], reason: str):
        super().__init__(
            message=f"Couldn't bind {name} socket on {address[0]}:{address[1]}: {reason}",
            code="BIND_ERROR",
            details={"socket": name, "host": address[0], "port": address[1]},
        )


class SendError(NodeException):
    """A datagram could not be sent."""

    def __init__(self, name: str, destination: str, reason: str):
        super().__init__(
            message=f"Couldn't send {name} to {destination}: {reason}",
            code="SEND_ERROR",
            details={"socket": name, "destination": destination},
        )


class CommandError(NodeException):
    """Base for failures tied to a single inbound datagram."""


class CommandDecodeError(CommandError):
    """Inbound datagram is not a well-formed command."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="COMMAND_DECODE_ERROR",
            details=details,
        )


class InvalidDestinationError(CommandError):
    """An endpoint string did not parse as ip:port."""

    def __init__(self, value: str, message: str = "Invalid address"):
        self.value = value
        super().__init__(
            message=f"{message}: {value}",
            code="INVALID_DESTINATION",
            details={"address": value},
        )
