"""
Input Node Service
Owns the sockets, the shared destination cell and both loops.

The node runs until one loop fails; the failure cancels the other loop,
closes every socket and propagates to the caller.
"""
import asyncio

from input_node.core import metrics
from input_node.core.config import Settings
from input_node.core.exceptions import CommandError, ConfigurationError, InvalidDestinationError
from input_node.core.logging import get_logger
from input_node.modules.node.destination import DestinationCell, parse_endpoint
from input_node.modules.node.handlers import DestinationUpdateHandler, PingHandler
from input_node.modules.node.listener import CommandListener
from input_node.modules.node.publisher import ReadingSource, TelemetryPublisher, generate_reading
from input_node.modules.node.schemas import NodeIdentity
from input_node.modules.node.transport import Address, UdpEndpoint

logger = get_logger(__name__)


class InputNode:
    """Emulated field device: telemetry publisher plus command listener."""

    def __init__(self, settings: Settings, reading_source: ReadingSource = generate_reading):
        self.settings = settings
        self.identity = NodeIdentity(area=settings.area, flow_name=settings.flow_name)
        self.original_target_port = settings.target_port
        self._reading_source = reading_source

        try:
            initial = parse_endpoint(f"{settings.target_ip}:{settings.target_port}")
        except InvalidDestinationError as e:
            raise ConfigurationError(
                "No valid target address given. Use format: <ip>:<port>",
                details=e.details,
            ) from e
        self.cell = DestinationCell(initial)

        self.data_endpoint: UdpEndpoint | None = None
        self.ack_endpoint: UdpEndpoint | None = None
        self.command_endpoint: UdpEndpoint | None = None
        self.publisher: TelemetryPublisher | None = None
        self.listener: CommandListener | None = None

    @property
    def command_address(self) -> Address:
        if self.command_endpoint is None:
            raise RuntimeError("Node not started")
        return self.command_endpoint.local_address

    async def start(self) -> None:
        """Bind all three sockets and build the loops."""
        host = self.settings.bind_host
        try:
            self.data_endpoint = await UdpEndpoint.bind("data", host, self.settings.outbound_port_data)
            self.ack_endpoint = await UdpEndpoint.bind("acks", host, self.settings.outbound_port_acks)
            self.command_endpoint = await UdpEndpoint.bind("commands", host, self.settings.inbound_port)
        except Exception:
            self.close()
            raise

        self.publisher = TelemetryPublisher(
            identity=self.identity,
            cell=self.cell,
            endpoint=self.data_endpoint,
            interval_seconds=self.settings.interval_seconds,
            reading_source=self._reading_source,
        )
        self.listener = CommandListener(
            endpoint=self.command_endpoint,
            update_handler=DestinationUpdateHandler(self.cell, self.original_target_port, self.ack_endpoint),
            ping_handler=PingHandler(self.ack_endpoint),
            buffer_size=self.settings.command_buffer_size,
            on_error=self.handle_command_error,
        )
        metrics.DESTINATION_PORT.set(self.cell.read().port)

        logger.info(
            "Input node started",
            target=str(self.cell.read()),
            data=self.data_endpoint.local_address,
            acks=self.ack_endpoint.local_address,
            commands=self.command_endpoint.local_address,
            interval_ms=self.settings.interval,
        )

    def handle_command_error(self, exc: CommandError, source: Address) -> None:
        """Decide abort vs. drop for a failed command datagram."""
        if self.settings.abort_on_malformed_command:
            raise exc

        metrics.COMMANDS_DROPPED.labels(error_code=exc.code).inc()
        logger.warning(
            "Dropping malformed command",
            source=f"{source[0]}:{source[1]}",
            error_code=exc.code,
            message=exc.message,
            details=exc.details,
        )

    async def run(self) -> None:
        """Run both loops until one of them fails, then re-raise its error."""
        if self.publisher is None or self.listener is None:
            await self.start()

        tasks = [
            asyncio.create_task(self.publisher.run(), name="telemetry-publisher"),
            asyncio.create_task(self.listener.run(), name="command-listener"),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                task.result()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self.close()
            logger.info("Input node stopped")

    def close(self) -> None:
        for endpoint in (self.data_endpoint, self.ack_endpoint, self.command_endpoint):
            if endpoint is not None:
                endpoint.close()
