"""node-arrange: port-aware layered layout for node-link diagrams."""

from node_arrange.api import apply_positions, arrange, result_to_dicts
from node_arrange.config import LayoutOptions
from node_arrange.errors import LayoutContractError
from node_arrange.ir.model import Edge, Endpoint, Node, Port
from node_arrange.layout.types import Position
from node_arrange.types import Direction, PortSide

__all__ = [
    "Direction",
    "Edge",
    "Endpoint",
    "LayoutContractError",
    "LayoutOptions",
    "Node",
    "Port",
    "PortSide",
    "Position",
    "apply_positions",
    "arrange",
    "result_to_dicts",
]
