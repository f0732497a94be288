"""Intermediate representation: input model and GraphIR."""

from node_arrange.ir.graph import EdgeData, GraphIR, NodeData
from node_arrange.ir.model import Edge, Endpoint, Node, NodeId, Port, coerce_edges, coerce_nodes

__all__ = [
    "Edge",
    "EdgeData",
    "Endpoint",
    "GraphIR",
    "Node",
    "NodeData",
    "NodeId",
    "Port",
    "coerce_edges",
    "coerce_nodes",
]
