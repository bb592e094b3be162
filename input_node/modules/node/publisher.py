"""Telemetry publisher loop."""
import asyncio
import random
from typing import Callable

from input_node.core import metrics
from input_node.core.logging import get_logger
from input_node.modules.node.destination import DestinationCell
from input_node.modules.node.schemas import NodeIdentity, TelemetryEnvelope
from input_node.modules.node.transport import UdpEndpoint

logger = get_logger(__name__)

ReadingSource = Callable[[], int]


def generate_reading() -> int:
    """Pseudo-random unsigned 16-bit sample."""
    return random.randint(0, 0xFFFF)


class TelemetryPublisher:
    """Sends one reading per interval to whatever the cell currently holds."""

    def __init__(
        self,
        identity: NodeIdentity,
        cell: DestinationCell,
        endpoint: UdpEndpoint,
        interval_seconds: float,
        reading_source: ReadingSource = generate_reading,
    ) -> None:
        self.identity = identity
        self.cell = cell
        self.endpoint = endpoint
        self.interval_seconds = interval_seconds
        self._reading_source = reading_source
        self.sent = 0

    def publish_once(self) -> int:
        reading = self._reading_source()
        payload = TelemetryEnvelope.for_reading(reading, self.identity).encode()

        destination = self.cell.read()
        logger.info("Sending data", target=str(destination), reading=reading)
        self.endpoint.send_to(payload, destination.address)

        self.sent += 1
        metrics.TELEMETRY_SENT.inc()
        return reading

    async def run(self) -> None:
        """Publish forever; the first tick fires immediately and late ticks are not skipped."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while True:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
            self.publish_once()
            next_tick += self.interval_seconds
