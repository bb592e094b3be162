from input_node.modules.node.destination import Destination, DestinationCell, parse_endpoint, rebase_port
from input_node.modules.node.service import InputNode

__all__ = ["Destination", "DestinationCell", "InputNode", "parse_endpoint", "rebase_port"]
