from input_node.core.config import Settings, load_settings
from input_node.core.logging import configure_logging, get_logger

__all__ = ["Settings", "load_settings", "configure_logging", "get_logger"]
