"""
Pytest Configuration and Fixtures.

Shared fixtures for every test module. All sockets bind to loopback on
ephemeral ports.
"""
import asyncio

import pytest

from input_node.core.config import Settings
from input_node.modules.node.destination import DestinationCell, parse_endpoint
from input_node.modules.node.schemas import NodeIdentity
from input_node.modules.node.transport import UdpEndpoint

LOOPBACK = "127.0.0.1"


def make_settings(**overrides) -> Settings:
    values = {
        "area": "test-area",
        "flow_name": "test-flow",
        "target_ip": LOOPBACK,
        "target_port": 15234,
        "bind_host": LOOPBACK,
        "outbound_port_data": 0,
        "outbound_port_acks": 0,
        "inbound_port": 0,
        "interval": 1000,
    }
    values.update(overrides)
    return Settings(**values)


async def receive(endpoint: UdpEndpoint, timeout: float = 2.0) -> tuple[bytes, tuple[str, int]]:
    return await asyncio.wait_for(endpoint.receive(), timeout=timeout)


async def drain(endpoint: UdpEndpoint, settle: float = 0.2) -> list[bytes]:
    """Collect datagrams until none arrive for ``settle`` seconds."""
    received = []
    while True:
        try:
            data, _ = await asyncio.wait_for(endpoint.receive(), timeout=settle)
        except asyncio.TimeoutError:
            return received
        received.append(data)


async def collect(endpoint: UdpEndpoint, duration: float) -> list[bytes]:
    """Collect datagrams for a fixed window, for peers that never go quiet."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + duration
    received = []
    while (remaining := deadline - loop.time()) > 0:
        try:
            data, _ = await asyncio.wait_for(endpoint.receive(), timeout=remaining)
        except asyncio.TimeoutError:
            break
        received.append(data)
    return received


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def identity() -> NodeIdentity:
    return NodeIdentity(area="test-area", flow_name="test-flow")


@pytest.fixture
def cell() -> DestinationCell:
    return DestinationCell(parse_endpoint(f"{LOOPBACK}:15234"))


@pytest.fixture
async def udp_peer():
    """A loopback socket playing the controller / collector side."""
    endpoint = await UdpEndpoint.bind("peer", LOOPBACK, 0)
    yield endpoint
    endpoint.close()


@pytest.fixture
async def second_peer():
    endpoint = await UdpEndpoint.bind("second-peer", LOOPBACK, 0)
    yield endpoint
    endpoint.close()


@pytest.fixture
async def node_endpoint():
    """A loopback socket standing in for one of the node's own sockets."""
    endpoint = await UdpEndpoint.bind("node", LOOPBACK, 0)
    yield endpoint
    endpoint.close()
