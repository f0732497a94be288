"""Layout engines and the strategy registry used by ``arrange``."""

from __future__ import annotations

import logging

from node_arrange.config import LayoutOptions
from node_arrange.ir.graph import GraphIR
from node_arrange.layout.sugiyama import (
    AugmentedGraph,
    LayerAssignment,
    LayerKey,
    assign_coordinates,
    count_crossings,
    insert_dummy_nodes,
    minimise_crossings,
)
from node_arrange.layout.types import LayoutNode, LayoutResult

logger = logging.getLogger(__name__)


class SugiyamaLayout:
    """Sugiyama layered layout engine with port-aware median ordering."""

    name = "sugiyama"

    def order_layers(self, aug: AugmentedGraph, options: LayoutOptions) -> list[list[LayerKey]]:
        return minimise_crossings(aug, options.max_passes)

    def layout(self, gir: GraphIR, options: LayoutOptions) -> LayoutResult:
        """Lay out each weakly connected component and stack them on the cross axis."""
        result = LayoutResult(nodes=[], direction=options.direction)
        cursor = 0.0

        for comp_idx, members in enumerate(gir.components()):
            sub = gir.subgraph(members)
            la = LayerAssignment.assign(sub)
            aug = insert_dummy_nodes(sub, la)
            ordering = self.order_layers(aug, options)

            placed = assign_coordinates(ordering, sub, options, component=comp_idx)
            cursor = _place_component(placed, cursor, options)

            result.nodes.extend(placed)
            result.feedback_edges.extend(la.feedback_edges)
            result.crossings += count_crossings(ordering, aug)

        logger.debug(
            "%s layout: %d nodes, %d feedback edges, %d crossings",
            self.name,
            len(result.nodes),
            len(result.feedback_edges),
            result.crossings,
        )
        return result


class MultipartiteLayout(SugiyamaLayout):
    """Layered layout without crossing minimisation.

    Each layer is one part of a multipartite graph and keeps caller order
    (real nodes first, then dummies by edge). Selected explicitly with
    ``strategy="multipartite"``.
    """

    name = "multipartite"

    def order_layers(self, aug: AugmentedGraph, options: LayoutOptions) -> list[list[LayerKey]]:
        ordering: list[list[LayerKey]] = [[] for _ in range(aug.layer_count)]
        for node_id in aug.nodes_in_order():
            ordering[aug.layers[node_id]].append(node_id)
        return ordering


ENGINES: dict[str, type[SugiyamaLayout]] = {
    SugiyamaLayout.name: SugiyamaLayout,
    MultipartiteLayout.name: MultipartiteLayout,
}


def layout_graph(gir: GraphIR, options: LayoutOptions) -> LayoutResult:
    """Run the layout strategy selected by ``options.strategy``."""
    engine = ENGINES[options.strategy]()
    return engine.layout(gir, options)


def _place_component(placed: list[LayoutNode], cursor: float, options: LayoutOptions) -> float:
    """Shift a component to its slot on the cross axis; return the next free slot."""
    vertical = options.is_vertical
    cross_gap = options.gap_x if vertical else options.gap_y
    extent = 0.0
    for node in placed:
        if vertical:
            node.x += cursor + options.start_x
            node.y += options.start_y
            extent = max(extent, node.x - options.start_x + node.width)
        else:
            node.x += options.start_x
            node.y += cursor + options.start_y
            extent = max(extent, node.y - options.start_y + node.height)
    return extent + cross_gap

