"""Command listener loop."""
from typing import Callable

from input_node.core import metrics
from input_node.core.exceptions import CommandError
from input_node.core.logging import get_logger
from input_node.modules.node.handlers import DestinationUpdateHandler, PingHandler
from input_node.modules.node.schemas import (
    InboundCommand,
    PingCommand,
    UpdateTargetCommand,
    decode_command,
    decode_text,
)
from input_node.modules.node.transport import Address, UdpEndpoint

logger = get_logger(__name__)

ErrorHook = Callable[[CommandError, Address], None]


def _raise(exc: CommandError, source: Address) -> None:
    raise exc


class CommandListener:
    """
    Receives command datagrams and dispatches them.

    Per-datagram failures are handed to ``on_error``; the default re-raises,
    which stops the listener.
    """

    def __init__(
        self,
        endpoint: UdpEndpoint,
        update_handler: DestinationUpdateHandler,
        ping_handler: PingHandler,
        buffer_size: int = 1024,
        on_error: ErrorHook = _raise,
    ) -> None:
        self.endpoint = endpoint
        self.update_handler = update_handler
        self.ping_handler = ping_handler
        self.buffer_size = buffer_size
        self.on_error = on_error

    async def process(self, payload: bytes, source: Address) -> InboundCommand | None:
        text = decode_text(payload[: self.buffer_size])
        logger.info("Received data", source=f"{source[0]}:{source[1]}", message=text)

        command = decode_command(text)
        metrics.COMMANDS_RECEIVED.labels(type=command.type if command else "unknown").inc()

        if isinstance(command, UpdateTargetCommand):
            await self.update_handler.handle(command, source)
        elif isinstance(command, PingCommand):
            await self.ping_handler.handle(command, source)
        return command

    async def run(self) -> None:
        while True:
            payload, source = await self.endpoint.receive()
            try:
                await self.process(payload, source)
            except CommandError as e:
                self.on_error(e, source)
