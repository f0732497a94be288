"""Layout engine registry and public API."""

from __future__ import annotations

from node_arrange.layout.engine import ENGINES, MultipartiteLayout, SugiyamaLayout, layout_graph
from node_arrange.layout.sugiyama import (
    STALE_PASS_LIMIT,
    AugmentedGraph,
    LayerAssignment,
    assign_coordinates,
    bilayer_crossings,
    count_crossings,
    find_feedback_edges,
    initial_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    remove_cycles,
)
from node_arrange.layout.types import DummyNode, FeedbackEdge, LayoutNode, LayoutResult, Position, Segment

__all__ = [
    "ENGINES",
    "STALE_PASS_LIMIT",
    "AugmentedGraph",
    "DummyNode",
    "FeedbackEdge",
    "LayerAssignment",
    "LayoutNode",
    "LayoutResult",
    "MultipartiteLayout",
    "Position",
    "Segment",
    "SugiyamaLayout",
    "assign_coordinates",
    "bilayer_crossings",
    "count_crossings",
    "find_feedback_edges",
    "initial_ordering",
    "insert_dummy_nodes",
    "layout_graph",
    "minimise_crossings",
    "remove_cycles",
]
