"""
Destination value, endpoint parsing and the shared destination cell.
"""
from __future__ import annotations

import ipaddress
import threading
from dataclasses import dataclass

from input_node.core.exceptions import InvalidDestinationError

PORT_SUFFIX_MODULUS = 10_000
PORT_SPACE = 1 << 16


@dataclass(frozen=True, slots=True)
class Destination:
    """A network endpoint telemetry is sent to."""

    host: str
    port: int

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_endpoint(value: str) -> Destination:
    """
    Parse ``ip:port`` or ``[ipv6]:port`` into a Destination.

    Hostnames are not resolved; the host must be an IP literal.
    """
    host, sep, port_text = value.rpartition(":")
    if not sep or not port_text.isascii() or not port_text.isdigit():
        raise InvalidDestinationError(value)

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        expect_v6 = True
    elif ":" in host:
        raise InvalidDestinationError(value)
    else:
        expect_v6 = False

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        raise InvalidDestinationError(value) from None
    if (ip.version == 6) != expect_v6:
        raise InvalidDestinationError(value)

    port = int(port_text)
    if port >= PORT_SPACE:
        raise InvalidDestinationError(value)

    return Destination(host=str(ip), port=port)


def rebase_port(port_base: int, original_port: int) -> int:
    """
    Combine a commanded port base with the last four digits of the original port.

    Overflow wraps in 16-bit unsigned arithmetic.
    """
    return (port_base + original_port % PORT_SUFFIX_MODULUS) % PORT_SPACE


class DestinationCell:
    """Holds the current destination; replaced wholesale, last writer wins."""

    def __init__(self, initial: Destination):
        self._lock = threading.Lock()
        self._value = initial

    def read(self) -> Destination:
        with self._lock:
            return self._value

    def replace(self, new: Destination) -> Destination:
        """Swap in ``new`` and return the previous value."""
        with self._lock:
            previous, self._value = self._value, new
        return previous
