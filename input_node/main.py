"""
Input Node - Main Entry Point
Parses the command line, loads settings and runs the node until it aborts.
"""
from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

from input_node import __version__
from input_node.core.config import Settings, load_settings
from input_node.core.exceptions import ConfigurationError, NodeException
from input_node.core.logging import bind_context, clear_context, configure_logging, get_logger
from input_node.core.metrics import start_metrics_server
from input_node.core.sentry import capture_fatal, init_sentry
from input_node.modules.node.service import InputNode

logger = get_logger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="input-node",
        description="A simple application emulating a physical input node",
    )
    parser.add_argument("-a", "--area", help="Area name")
    parser.add_argument("-f", "--flow", help="Flow name")
    parser.add_argument("-t", "--target-ip", help="The initial target ip")
    parser.add_argument("-p", "--target-port", type=int, help="The initial target port")
    parser.add_argument("-o", "--outbound-port-data", type=int, help="The outgoing port for sending data")
    parser.add_argument("--outbound-port-acks", type=int, help="The outgoing port for sending ACKs (default: 0)")
    parser.add_argument("-i", "--inbound-port", type=int, help="The incoming port")
    parser.add_argument("--interval", type=int, help="Data interval in ms (default: 1000)")
    parser.add_argument("-c", "--config", help="YAML config file")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    return load_settings(
        args.config,
        area=args.area,
        flow_name=args.flow,
        target_ip=args.target_ip,
        target_port=args.target_port,
        outbound_port_data=args.outbound_port_data,
        outbound_port_acks=args.outbound_port_acks,
        inbound_port=args.inbound_port,
        interval=args.interval,
    )


async def serve(settings: Settings) -> None:
    node = InputNode(settings)
    await node.start()
    await node.run()


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)

    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        configure_logging()
        logger.error("Couldn't load config", error_code=e.code, message=e.message, details=e.details)
        raise SystemExit(1) from e

    configure_logging(settings)
    logger.info(
        "Config loaded",
        **settings.model_dump(exclude={"sentry_dsn", "project_name"}),
    )
    init_sentry(settings)
    if settings.metrics_enabled:
        start_metrics_server(settings.metrics_port)

    bind_context(area=settings.area, flow_name=settings.flow_name)
    logger.info(
        "Starting input node",
        flow_name=settings.flow_name,
        area=settings.area,
    )

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except NodeException as e:
        logger.error("Input node aborted", error_code=e.code, message=e.message, details=e.details)
        capture_fatal(e)
        raise SystemExit(1) from e
    finally:
        clear_context()


if __name__ == "__main__":
    main()
