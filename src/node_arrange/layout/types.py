"""Layout types shared across layout phases and the public API."""

from __future__ import annotations

from dataclasses import dataclass, field

from node_arrange.ir.graph import EdgeData
from node_arrange.ir.model import NodeId
from node_arrange.types import Direction


@dataclass(frozen=True)
class DummyNode:
    """Placeholder occupying one intermediate layer of a long edge."""

    edge: int  # caller order of the edge it belongs to
    step: int


@dataclass(frozen=True)
class Segment:
    """One layer-to-layer hop of an edge, with the port indices at its ends."""

    source_index: int
    target_index: int


@dataclass
class LayoutNode:
    """A positioned node in the layout."""

    id: NodeId
    layer: int
    order: int
    x: float
    y: float
    width: float
    height: float
    component: int = 0


@dataclass(frozen=True)
class FeedbackEdge:
    """An edge that closes a cycle; excluded from ranking and crossing counts."""

    source: NodeId
    target: NodeId
    data: EdgeData


@dataclass(frozen=True)
class Position:
    """Final position of one caller node."""

    id: NodeId
    x: float
    y: float

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "x": _tidy(self.x), "y": _tidy(self.y)}


@dataclass
class LayoutResult:
    """Self-contained layout output."""

    nodes: list[LayoutNode]
    direction: Direction
    feedback_edges: list[FeedbackEdge] = field(default_factory=list)
    crossings: int = 0


def _tidy(value: float) -> float | int:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
