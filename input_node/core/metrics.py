"""
Prometheus Metrics - Node Monitoring

Exposed over HTTP for Prometheus scraping when metrics are enabled.
"""
from prometheus_client import Counter, Gauge, Info, start_http_server

from input_node import __version__
from input_node.core.logging import get_logger

logger = get_logger(__name__)

# === Application Info ===
APP_INFO = Info("input_node_app", "Input node application info")
APP_INFO.info({"version": __version__})

# === Telemetry Metrics ===
TELEMETRY_SENT = Counter(
    "input_node_telemetry_sent_total",
    "Total telemetry datagrams sent",
)

DESTINATION_PORT = Gauge(
    "input_node_destination_port",
    "Port of the current telemetry destination",
)

# === Command Metrics ===
COMMANDS_RECEIVED = Counter(
    "input_node_commands_received_total",
    "Total command datagrams received",
    ["type"],
)

COMMANDS_DROPPED = Counter(
    "input_node_commands_dropped_total",
    "Malformed command datagrams dropped",
    ["error_code"],
)

TARGET_UPDATES = Counter(
    "input_node_target_updates_total",
    "Total destination updates applied",
)

ACKS_SENT = Counter(
    "input_node_acks_sent_total",
    "Total acknowledgment datagrams sent",
)

PING_REPLIES = Counter(
    "input_node_ping_replies_total",
    "Total ping replies sent",
)


def start_metrics_server(port: int) -> None:
    """Start the Prometheus HTTP exporter in a background thread."""
    start_http_server(port)
    logger.info("Metrics exporter started", port=port)
