"""
Sentry Integration - Error Tracking

Sentry captures the fatal error that aborts the node.
"""
import sentry_sdk

from input_node import __version__
from input_node.core.config import Settings
from input_node.core.exceptions import NodeException
from input_node.core.logging import get_logger

logger = get_logger(__name__)


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry SDK.

    Returns False when no DSN is configured.
    """
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping initialization")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"input-node@{__version__}",
        send_default_pii=False,
    )
    sentry_sdk.set_tag("area", settings.area)
    sentry_sdk.set_tag("flow_name", settings.flow_name)

    logger.info("Sentry initialized", environment=settings.environment)
    return True


def capture_fatal(exc: BaseException) -> None:
    """Report a fatal error and flush before the process exits."""
    if isinstance(exc, NodeException):
        sentry_sdk.set_context("node_error", {"code": exc.code, **exc.details})
    sentry_sdk.capture_exception(exc)
    sentry_sdk.flush(timeout=2.0)
