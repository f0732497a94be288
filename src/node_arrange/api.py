"""Public entry points: arrange a graph and apply the result."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence

from node_arrange.config import LayoutOptions
from node_arrange.errors import LayoutContractError
from node_arrange.ir.graph import GraphIR
from node_arrange.ir.model import Node, coerce_edges, coerce_nodes
from node_arrange.layout.engine import layout_graph
from node_arrange.layout.types import Position


def arrange(nodes: Sequence[object], edges: Sequence[object], options: object = None) -> list[Position]:
    """Compute a layered layout for ``nodes`` connected by ``edges``.

    Args:
        nodes: Node objects or mappings (``{"id", "width"?, "height"?, "ports"?}``).
        edges: Edge objects or mappings in any accepted edge shape.
        options: None, a mapping (``gapX``, ``gapY``, ``direction``, ...) or LayoutOptions.
            Unrecognised mapping keys are ignored.

    Returns:
        One Position per input node, in input order.

    Raises:
        LayoutContractError: If nodes, edges or options have the wrong shape.
        ValueError: If an option value is out of range or unknown.
    """
    node_list = coerce_nodes(nodes)
    edge_list = coerce_edges(edges)
    opts = LayoutOptions.coerce(options)
    if not node_list:
        return []

    gir = GraphIR.build(node_list, edge_list, opts.node_width, opts.node_height)
    result = layout_graph(gir, opts)
    by_id = {n.id: n for n in result.nodes}
    return [Position(id=node.id, x=by_id[node.id].x, y=by_id[node.id].y) for node in node_list]


def apply_positions(nodes: Sequence[object], positions: Sequence[object]) -> list[object]:
    """Return copies of ``nodes`` moved to ``positions``; unmatched nodes are returned as-is.

    Mapping nodes get ``x``/``y`` replaced (and ``position`` too when they
    carry one); Node objects are copied with ``dataclasses.replace``.
    """
    if not isinstance(nodes, Sequence) or isinstance(nodes, (str, bytes)):
        raise LayoutContractError(f"nodes must be a list or tuple, got {type(nodes).__name__}")
    if not isinstance(positions, Sequence) or isinstance(positions, (str, bytes)):
        raise LayoutContractError(f"positions must be a list or tuple, got {type(positions).__name__}")

    lookup: dict[object, tuple[float, float]] = {}
    for i, pos in enumerate(positions):
        if isinstance(pos, Position):
            lookup[pos.id] = (pos.x, pos.y)
        elif isinstance(pos, Mapping):
            lookup[pos.get("id")] = (pos.get("x"), pos.get("y"))
        else:
            raise LayoutContractError(f"positions[{i}] must be a Position or mapping, got {type(pos).__name__}")

    updated: list[object] = []
    for i, node in enumerate(nodes):
        if isinstance(node, Node):
            node_id = node.id
        elif isinstance(node, Mapping):
            node_id = node.get("id")
        else:
            raise LayoutContractError(f"nodes[{i}] must be a Node or mapping, got {type(node).__name__}")
        if node_id not in lookup:
            updated.append(node)
            continue
        x, y = lookup[node_id]
        if isinstance(node, Node):
            updated.append(dataclasses.replace(node, x=x, y=y))
        else:
            moved = dict(node)
            moved["x"], moved["y"] = x, y
            if isinstance(node.get("position"), Mapping):
                moved["position"] = {**node["position"], "x": x, "y": y}
            updated.append(moved)
    return updated


def result_to_dicts(positions: Sequence[Position]) -> list[dict[str, object]]:
    """Convert positions to the ``[{"id", "x", "y"}]`` output contract."""
    return [p.to_dict() for p in positions]
