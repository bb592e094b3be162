"""
UDP endpoint built on asyncio datagram transports.

Each endpoint owns one bound socket for the lifetime of the node.
"""
import asyncio

from input_node.core.exceptions import BindError, SendError
from input_node.core.logging import get_logger

logger = get_logger(__name__)

Address = tuple[str, int]


class _EndpointProtocol(asyncio.DatagramProtocol):
    def __init__(self, name: str):
        self.name = name
        self.datagrams: asyncio.Queue[tuple[bytes, Address]] = asyncio.Queue()
        self.last_error: OSError | None = None

    def datagram_received(self, data: bytes, addr: Address) -> None:
        self.datagrams.put_nowait((data, addr[:2]))

    def error_received(self, exc: OSError) -> None:
        # Selector transports report sendto failures here synchronously
        self.last_error = exc
        logger.debug("Socket error reported", socket=self.name, error=str(exc))


class UdpEndpoint:
    """A bound UDP socket with awaitable receive and fail-loud send."""

    def __init__(self, name: str, transport: asyncio.DatagramTransport, protocol: _EndpointProtocol):
        self.name = name
        self._transport = transport
        self._protocol = protocol

    @classmethod
    async def bind(cls, name: str, host: str, port: int) -> "UdpEndpoint":
        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: _EndpointProtocol(name),
                local_addr=(host, port),
            )
        except OSError as e:
            raise BindError(name, (host, port), str(e)) from e

        endpoint = cls(name, transport, protocol)
        logger.debug("Socket bound", socket=name, address=endpoint.local_address)
        return endpoint

    @property
    def local_address(self) -> Address:
        return self._transport.get_extra_info("sockname")[:2]

    def send_to(self, data: bytes, address: Address) -> None:
        """Send one datagram; raise SendError if the socket reports a failure."""
        if self._transport.is_closing():
            raise SendError(self.name, _format(address), "socket closed")

        # A failure left by an earlier buffered send surfaces before anything new goes out
        self._raise_pending(address)
        self._transport.sendto(data, address)
        self._raise_pending(address)

    def _raise_pending(self, address: Address) -> None:
        error = self._protocol.last_error
        if error is not None:
            self._protocol.last_error = None
            raise SendError(self.name, _format(address), str(error)) from error

    async def receive(self) -> tuple[bytes, Address]:
        """Wait for the next datagram."""
        return await self._protocol.datagrams.get()

    def close(self) -> None:
        self._transport.close()


def _format(address: Address) -> str:
    host, port = address
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
