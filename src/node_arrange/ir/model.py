"""Input data structures for the layout engine.

These types describe what the caller hands to ``arrange``: nodes with optional
sizes and port declarations, and edges between (node, port) endpoints. Mapping
input is validated here once so that downstream phases can assume
well-formed data.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from node_arrange.errors import LayoutContractError
from node_arrange.types import PortSide

NodeId = str | int


@dataclass(frozen=True)
class Port:
    name: str
    side: PortSide
    index: int


@dataclass
class Node:
    id: NodeId
    width: float | None = None
    height: float | None = None
    x: float | None = None  # hint only, never read by the layout
    y: float | None = None
    ports: list[Port] = field(default_factory=list)

    def port_index(self, side: PortSide, name: str | None) -> int:
        """Index of the named port on ``side``; undeclared ports resolve to 0."""
        if name is None:
            return 0
        for port in self.ports:
            if port.side is side and port.name == name:
                return port.index
        return 0

    def port_count(self, side: PortSide) -> int:
        indices = [p.index for p in self.ports if p.side is side]
        return max(max(indices, default=0) + 1, 1)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], where: str = "node") -> Node:
        node_id = data.get("id")
        _check_id(node_id, f"{where}.id")

        width = data.get("width")
        height = data.get("height")
        measured = data.get("measured")
        if isinstance(measured, Mapping):
            width = measured.get("width") if width is None else width
            height = measured.get("height") if height is None else height
        _check_size(width, f"{where}.width")
        _check_size(height, f"{where}.height")

        x, y = data.get("x"), data.get("y")
        position = data.get("position")
        if isinstance(position, Mapping):
            x, y = position.get("x", x), position.get("y", y)

        return cls(
            id=node_id,
            width=width,
            height=height,
            x=x if _is_number(x) else None,
            y=y if _is_number(y) else None,
            ports=_ports_from_mapping(data, where),
        )


@dataclass(frozen=True)
class Endpoint:
    node_id: NodeId | None
    port: str | None = None


@dataclass(frozen=True)
class Edge:
    source: Endpoint
    target: Endpoint

    @classmethod
    def new(cls, from_id: NodeId, from_port: str | None, to_id: NodeId, to_port: str | None) -> Edge:
        return cls(source=Endpoint(from_id, from_port), target=Endpoint(to_id, to_port))

    @property
    def key(self) -> tuple[NodeId | None, str | None, NodeId | None, str | None]:
        return (self.source.node_id, self.source.port, self.target.node_id, self.target.port)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], where: str = "edge") -> Edge:
        """Accept ``{from, to}``, flat ``fromNodeId`` and ``{source, target}`` edge shapes."""
        src, tgt = data.get("from"), data.get("to")
        if isinstance(src, Mapping) or isinstance(tgt, Mapping):
            return cls(source=_endpoint(src, f"{where}.from"), target=_endpoint(tgt, f"{where}.to"))
        if "fromNodeId" in data or "toNodeId" in data:
            return cls(
                source=Endpoint(data.get("fromNodeId"), data.get("fromPortName")),
                target=Endpoint(data.get("toNodeId"), data.get("toPortName")),
            )
        return cls(
            source=Endpoint(data.get("source"), data.get("sourceHandle")),
            target=Endpoint(data.get("target"), data.get("targetHandle")),
        )


def _endpoint(raw: object, where: str) -> Endpoint:
    if raw is None:
        return Endpoint(None)
    if not isinstance(raw, Mapping):
        raise LayoutContractError(f"{where} must be a mapping, got {type(raw).__name__}")
    node_id = raw.get("nodeId", raw.get("node_id", raw.get("id")))
    port = raw.get("portName", raw.get("port_name", raw.get("port")))
    return Endpoint(node_id, port)


def _ports_from_mapping(data: Mapping[str, object], where: str) -> list[Port]:
    ports: list[Port] = []
    counters = {PortSide.INPUT: 0, PortSide.OUTPUT: 0}

    declared = data.get("ports")
    if declared is not None:
        if not _is_sequence(declared):
            raise LayoutContractError(f"{where}.ports must be a list, got {type(declared).__name__}")
        for i, raw in enumerate(declared):
            if isinstance(raw, Port):
                _check_port(raw, f"{where}.ports[{i}]")
                ports.append(raw)
                counters[raw.side] = max(counters[raw.side], raw.index + 1)
                continue
            if not isinstance(raw, Mapping):
                raise LayoutContractError(f"{where}.ports[{i}] must be a mapping, got {type(raw).__name__}")
            try:
                side = PortSide.parse(raw.get("side"))
            except ValueError as e:
                raise LayoutContractError(f"{where}.ports[{i}]: {e}") from e
            index = raw.get("index")
            if index is None:
                index = counters[side]
            else:
                _check_index(index, f"{where}.ports[{i}].index")
            counters[side] = max(counters[side], index + 1)
            ports.append(Port(name=raw.get("name", raw.get("portName")), side=side, index=index))

    for key, side in (("inputs", PortSide.INPUT), ("outputs", PortSide.OUTPUT)):
        names = data.get(key)
        if names is None:
            continue
        if not _is_sequence(names):
            raise LayoutContractError(f"{where}.{key} must be a list, got {type(names).__name__}")
        for raw in names:
            name = raw.get("name", raw.get("id")) if isinstance(raw, Mapping) else raw
            ports.append(Port(name=name, side=side, index=counters[side]))
            counters[side] += 1

    return ports


def coerce_nodes(nodes: object) -> list[Node]:
    """Validate the caller's node collection and convert it to Node objects."""
    if not _is_sequence(nodes):
        raise LayoutContractError(f"nodes must be a list or tuple, got {type(nodes).__name__}")
    result: list[Node] = []
    seen: set[NodeId] = set()
    for i, raw in enumerate(nodes):
        where = f"nodes[{i}]"
        if isinstance(raw, Node):
            _check_id(raw.id, f"{where}.id")
            _check_size(raw.width, f"{where}.width")
            _check_size(raw.height, f"{where}.height")
            for j, port in enumerate(raw.ports):
                _check_port(port, f"{where}.ports[{j}]")
            node = raw
        elif isinstance(raw, Mapping):
            node = Node.from_mapping(raw, where)
        else:
            raise LayoutContractError(f"{where} must be a Node or mapping, got {type(raw).__name__}")
        if node.id in seen:
            raise LayoutContractError(f"{where}: duplicate node id {node.id!r}")
        seen.add(node.id)
        result.append(node)
    return result


def coerce_edges(edges: object) -> list[Edge]:
    """Validate the caller's edge collection and convert it to Edge objects."""
    if not _is_sequence(edges):
        raise LayoutContractError(f"edges must be a list or tuple, got {type(edges).__name__}")
    result: list[Edge] = []
    for i, raw in enumerate(edges):
        if isinstance(raw, Edge):
            edge = raw
        elif isinstance(raw, Mapping):
            edge = Edge.from_mapping(raw, f"edges[{i}]")
        else:
            raise LayoutContractError(f"edges[{i}] must be an Edge or mapping, got {type(raw).__name__}")
        for label, end in (("from", edge.source), ("to", edge.target)):
            for part, value in (("node id", end.node_id), ("port", end.port)):
                if value is not None:
                    _check_id(value, f"edges[{i}].{label} {part}")
        result.append(edge)
    return result


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_id(value: object, where: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise LayoutContractError(f"{where} must be a str or int, got {type(value).__name__}")


def _check_size(value: object, where: str) -> None:
    if value is None:
        return
    if not _is_number(value):
        raise LayoutContractError(f"{where} must be a number, got {type(value).__name__}")
    if not math.isfinite(value) or value <= 0:
        raise LayoutContractError(f"{where} must be a positive finite number, got {value!r}")


def _check_index(value: object, where: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise LayoutContractError(f"{where} must be an int, got {type(value).__name__}")
    if value < 0:
        raise LayoutContractError(f"{where} must be non-negative, got {value}")


def _check_port(port: object, where: str) -> None:
    if not isinstance(port, Port):
        raise LayoutContractError(f"{where} must be a Port, got {type(port).__name__}")
    if not isinstance(port.side, PortSide):
        raise LayoutContractError(f"{where}.side must be a PortSide, got {type(port.side).__name__}")
    _check_index(port.index, f"{where}.index")
