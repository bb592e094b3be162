"""
Command handlers: destination update and UDP ping.
"""
import time

from input_node.core import metrics
from input_node.core.logging import get_logger
from input_node.modules.node.destination import Destination, DestinationCell, parse_endpoint, rebase_port
from input_node.modules.node.schemas import PingCommand, UpdateTargetAck, UpdateTargetCommand, encode_timestamp
from input_node.modules.node.transport import Address, UdpEndpoint

logger = get_logger(__name__)

# UDP gives no delivery guarantee, so every ACK goes out this many times
ACK_BURST_COUNT = 10


class DestinationUpdateHandler:
    """
    Applies ``updateTarget`` commands.

    The new port keeps the last four digits of the port the node was started
    with, so a controller can move a whole class of nodes with one base value.
    """

    def __init__(self, cell: DestinationCell, original_port: int, ack_endpoint: UdpEndpoint):
        self.cell = cell
        self.original_port = original_port
        self.ack_endpoint = ack_endpoint
        self._ack_payload = UpdateTargetAck().encode()

    async def handle(self, command: UpdateTargetCommand, source: Address) -> Destination:
        new_port = rebase_port(command.target_port_base, self.original_port)
        logger.info("New target port", port=new_port, port_base=command.target_port_base)

        destination = parse_endpoint(f"{command.target}:{new_port}")
        previous = self.cell.replace(destination)
        metrics.TARGET_UPDATES.inc()
        metrics.DESTINATION_PORT.set(destination.port)
        logger.info("Target updated", previous=str(previous), target=str(destination))

        logger.info("Sending ACK", to=f"{source[0]}:{source[1]}", count=ACK_BURST_COUNT)
        for _ in range(ACK_BURST_COUNT):
            self.ack_endpoint.send_to(self._ack_payload, source)
        metrics.ACKS_SENT.inc(ACK_BURST_COUNT)
        return destination


def timestamp_micros() -> int:
    """Wall-clock microseconds since the Unix epoch."""
    return time.time_ns() // 1_000


class PingHandler:
    """Answers ``udpPing`` with the current time for latency measurement."""

    def __init__(self, ack_endpoint: UdpEndpoint):
        self.ack_endpoint = ack_endpoint

    async def handle(self, command: PingCommand, source: Address) -> int:
        reply_to = parse_endpoint(command.reply_to)
        micros = timestamp_micros()
        self.ack_endpoint.send_to(encode_timestamp(micros), reply_to.address)
        metrics.PING_REPLIES.inc()
        logger.info("Sent UDP ping response", reply_to=str(reply_to), timestamp=micros)
        return micros
