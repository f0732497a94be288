"""Graph IR: normalises caller nodes/edges into a networkx MultiDiGraph for layout.

This module owns the internal graph used by every layout phase. Each node
carries its caller-array position and resolved size; each edge is keyed by its
``(source_port, target_port)`` pair and carries the resolved port indices, so
that several edges between the same two nodes stay distinct when they attach
to different ports and collapse when they are exact duplicates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import networkx as nx

from node_arrange.config import DEFAULT_NODE_HEIGHT, DEFAULT_NODE_WIDTH
from node_arrange.ir.model import Edge, Node, NodeId
from node_arrange.types import PortSide

logger = logging.getLogger(__name__)


@dataclass
class NodeData:
    id: NodeId
    order: int
    width: float
    height: float
    input_count: int = 1
    output_count: int = 1


@dataclass(frozen=True)
class EdgeData:
    source_port: str | None
    target_port: str | None
    source_index: int
    target_index: int
    order: int


EdgeRef = tuple[NodeId, EdgeData]


class GraphIR:
    """The normalised graph handed to the layout phases.

    Wraps a networkx MultiDiGraph and exposes helpers for port-grouped
    adjacency and component queries. Node iteration follows caller order.
    """

    def __init__(self, digraph: nx.MultiDiGraph, dropped_edges: int = 0, duplicate_edges: int = 0) -> None:
        self.digraph = digraph
        self.dropped_edges = dropped_edges
        self.duplicate_edges = duplicate_edges

    @classmethod
    def build(
        cls,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        default_width: float = DEFAULT_NODE_WIDTH,
        default_height: float = DEFAULT_NODE_HEIGHT,
    ) -> GraphIR:
        """Build a GraphIR from validated nodes and edges.

        Edges referencing a node that is not in ``nodes`` are discarded, and
        repeated edges with the same endpoints and ports are kept once.
        """
        digraph: nx.MultiDiGraph = nx.MultiDiGraph()
        by_id: dict[NodeId, Node] = {}

        for order, node in enumerate(nodes):
            by_id[node.id] = node
            data = NodeData(
                id=node.id,
                order=order,
                width=node.width if node.width is not None else default_width,
                height=node.height if node.height is not None else default_height,
                input_count=node.port_count(PortSide.INPUT),
                output_count=node.port_count(PortSide.OUTPUT),
            )
            digraph.add_node(node.id, data=data)

        dropped = 0
        duplicates = 0
        for order, edge in enumerate(edges):
            src, tgt = edge.source.node_id, edge.target.node_id
            if src not in by_id or tgt not in by_id:
                logger.debug("dropping edge %r: endpoint not in node set", edge.key)
                dropped += 1
                continue
            key = (edge.source.port, edge.target.port)
            if digraph.has_edge(src, tgt, key=key):
                logger.debug("ignoring duplicate edge %r", edge.key)
                duplicates += 1
                continue
            data = EdgeData(
                source_port=edge.source.port,
                target_port=edge.target.port,
                source_index=by_id[src].port_index(PortSide.OUTPUT, edge.source.port),
                target_index=by_id[tgt].port_index(PortSide.INPUT, edge.target.port),
                order=order,
            )
            digraph.add_edge(src, tgt, key=key, data=data)

        return cls(digraph=digraph, dropped_edges=dropped, duplicate_edges=duplicates)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()

    def node_ids(self) -> list[NodeId]:
        return list(self.digraph.nodes)

    def node_data(self, node_id: NodeId) -> NodeData:
        return self.digraph.nodes[node_id]["data"]

    def order_of(self, node_id: NodeId) -> int:
        return self.node_data(node_id).order

    def edges(self) -> list[tuple[NodeId, NodeId, EdgeData]]:
        """All edges in caller order."""
        result = [(src, tgt, attrs["data"]) for src, tgt, attrs in self.digraph.edges(data=True)]
        result.sort(key=lambda e: e[2].order)
        return result

    def out_edges(self, node_id: NodeId) -> list[EdgeRef]:
        """Outgoing edges sorted by source port, then target order and port."""
        refs = [(tgt, attrs["data"]) for _, tgt, attrs in self.digraph.out_edges(node_id, data=True)]
        refs.sort(key=lambda r: (r[1].source_index, self.order_of(r[0]), r[1].target_index, r[1].order))
        return refs

    def in_edges(self, node_id: NodeId) -> list[EdgeRef]:
        """Incoming edges sorted by target port, then source order and port."""
        refs = [(src, attrs["data"]) for src, _, attrs in self.digraph.in_edges(node_id, data=True)]
        refs.sort(key=lambda r: (r[1].target_index, self.order_of(r[0]), r[1].source_index, r[1].order))
        return refs

    def outgoing_by_port(self, node_id: NodeId) -> dict[int, list[EdgeRef]]:
        grouped: dict[int, list[EdgeRef]] = {}
        for ref in self.out_edges(node_id):
            grouped.setdefault(ref[1].source_index, []).append(ref)
        return grouped

    def incoming_by_port(self, node_id: NodeId) -> dict[int, list[EdgeRef]]:
        grouped: dict[int, list[EdgeRef]] = {}
        for ref in self.in_edges(node_id):
            grouped.setdefault(ref[1].target_index, []).append(ref)
        return grouped

    def degree(self, node_id: NodeId) -> int:
        """Fan-in plus fan-out, counting parallel edges on different ports separately."""
        return self.digraph.degree(node_id)

    def neighbors(self, node_id: NodeId) -> list[NodeId]:
        """Distinct adjacent nodes in either direction, self excluded, in caller order."""
        found = {n for n in self.digraph.successors(node_id) if n != node_id}
        found.update(n for n in self.digraph.predecessors(node_id) if n != node_id)
        return sorted(found, key=self.order_of)

    def components(self) -> list[list[NodeId]]:
        """Weakly connected components, ordered by their first node in caller order."""
        comps = [sorted(c, key=self.order_of) for c in nx.weakly_connected_components(self.digraph)]
        comps.sort(key=lambda c: self.order_of(c[0]))
        return comps

    def subgraph(self, node_ids: Iterable[NodeId]) -> GraphIR:
        """Induced sub-GraphIR preserving caller order of nodes and edges."""
        keep = set(node_ids)
        sub: nx.MultiDiGraph = nx.MultiDiGraph()
        for node_id in self.digraph.nodes:
            if node_id in keep:
                sub.add_node(node_id, **self.digraph.nodes[node_id])
        for src, tgt, key, attrs in self.digraph.edges(keys=True, data=True):
            if src in keep and tgt in keep:
                sub.add_edge(src, tgt, key=key, **attrs)
        return GraphIR(digraph=sub)
