"""
Destination Tests.

Endpoint parsing, port rebasing and the shared destination cell.
"""
import threading

import pytest

from input_node.core.exceptions import InvalidDestinationError
from input_node.modules.node.destination import Destination, DestinationCell, parse_endpoint, rebase_port


class TestParseEndpoint:
    """parse_endpoint tests."""

    def test_ipv4(self):
        assert parse_endpoint("10.0.0.5:25234") == Destination("10.0.0.5", 25234)

    def test_bracketed_ipv6(self):
        destination = parse_endpoint("[::1]:9999")
        assert destination == Destination("::1", 9999)
        assert str(destination) == "[::1]:9999"

    @pytest.mark.parametrize(
        "value",
        [
            "10.0.0.5",
            "10.0.0.5:",
            "10.0.0.5:65536",
            "10.0.0.5:-1",
            "10.0.0.5:+80",
            "localhost:8080",
            "::1:8080",
            "[10.0.0.5]:8080",
            "300.0.0.1:80",
            ":80",
            "",
        ],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidDestinationError) as exc_info:
            parse_endpoint(value)
        assert exc_info.value.value == value
        assert value in exc_info.value.message

    def test_str_round_trips(self):
        assert str(parse_endpoint("127.0.0.1:9999")) == "127.0.0.1:9999"


class TestRebasePort:
    """Port rebasing tests."""

    def test_keeps_last_four_digits(self):
        assert rebase_port(20000, 15234) == 25234

    def test_zero_base(self):
        assert rebase_port(0, 15234) == 5234

    def test_original_port_below_suffix_modulus(self):
        assert rebase_port(30000, 8080) == 38080

    def test_wraps_on_overflow(self):
        # 65535 + 9999 = 75534 -> 75534 - 65536
        assert rebase_port(65535, 19999) == 9998

    def test_largest_value_without_wrap(self):
        assert rebase_port(60000, 5535) == 65535
        assert rebase_port(60000, 5536) == 0


class TestDestinationCell:
    """DestinationCell tests."""

    def test_read_returns_initial(self):
        cell = DestinationCell(Destination("127.0.0.1", 1000))
        assert cell.read() == Destination("127.0.0.1", 1000)

    def test_replace_returns_previous(self):
        cell = DestinationCell(Destination("127.0.0.1", 1000))
        previous = cell.replace(Destination("10.0.0.5", 2000))
        assert previous == Destination("127.0.0.1", 1000)
        assert cell.read() == Destination("10.0.0.5", 2000)

    def test_independent_instances(self):
        first = DestinationCell(Destination("127.0.0.1", 1000))
        second = DestinationCell(Destination("127.0.0.1", 1000))
        first.replace(Destination("10.0.0.5", 2000))
        assert second.read() == Destination("127.0.0.1", 1000)

    def test_readers_never_see_mixed_values(self):
        pairs = [Destination(f"10.0.0.{i}", 20000 + i) for i in range(1, 9)]
        valid = set(pairs)
        cell = DestinationCell(pairs[0])
        stop = threading.Event()
        torn = []

        def writer():
            i = 0
            while not stop.is_set():
                cell.replace(pairs[i % len(pairs)])
                i += 1

        def reader():
            for _ in range(20_000):
                value = cell.read()
                if value not in valid:
                    torn.append(value)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads[1:]:
            thread.join()
        stop.set()
        threads[0].join()

        assert torn == []
