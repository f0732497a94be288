"""Sugiyama-style layered graph layout engine with port-aware ordering.

Phases:
  1. Cycle removal (iterative DFS, feedback edges set aside)
  2. Layer assignment (longest path over a topological order)
  3. Dummy node insertion
  4. Crossing minimization (port-aware median, best snapshot kept)
  5. Coordinate assignment (baseline stacking + pendant smoothing)
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

import networkx as nx

from node_arrange.config import DEFAULT_MAX_PASSES, LayoutOptions
from node_arrange.ir.graph import EdgeRef, GraphIR
from node_arrange.ir.model import NodeId
from node_arrange.layout.types import DummyNode, FeedbackEdge, LayoutNode, Segment

logger = logging.getLogger(__name__)

LayerKey = NodeId | DummyNode

# Passes without strict improvement before the sweep loop gives up.
STALE_PASS_LIMIT: int = 2


# ─── Cycle Removal (iterative DFS) ───────────────────────────────────────────


def find_feedback_edges(gir: GraphIR) -> list[FeedbackEdge]:
    """Classify every edge whose target is on the active DFS stack as feedback.

    Roots are taken in caller order and successors in port order. The
    traversal keeps its own stack of (node, successors, next position)
    frames, so graph depth is not bounded by the interpreter's recursion
    limit.
    """
    visited: set[NodeId] = set()
    on_stack: set[NodeId] = set()
    feedback: list[FeedbackEdge] = []

    for root in gir.node_ids():
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack: list[tuple[NodeId, list[EdgeRef], int]] = [(root, gir.out_edges(root), 0)]

        while stack:
            node, successors, pos = stack[-1]
            if pos == len(successors):
                stack.pop()
                on_stack.discard(node)
                continue
            stack[-1] = (node, successors, pos + 1)
            target, data = successors[pos]
            if target in on_stack:
                feedback.append(FeedbackEdge(source=node, target=target, data=data))
            elif target not in visited:
                visited.add(target)
                on_stack.add(target)
                stack.append((target, gir.out_edges(target), 0))

    return feedback


def remove_cycles(gir: GraphIR) -> tuple[nx.DiGraph, list[FeedbackEdge]]:
    """Remove feedback edges. Returns (dag over node ids, feedback_edges)."""
    feedback = find_feedback_edges(gir)
    feedback_orders = {fe.data.order for fe in feedback}

    dag: nx.DiGraph = nx.DiGraph()
    for node_id in gir.node_ids():
        dag.add_node(node_id)
    for src, tgt, data in gir.edges():
        if data.order not in feedback_orders:
            dag.add_edge(src, tgt)

    for fe in feedback:
        logger.debug("feedback edge %r -> %r", fe.source, fe.target)
    return dag, feedback


# ─── Layer Assignment ────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(self, layers: dict[NodeId, int], layer_count: int, feedback_edges: list[FeedbackEdge]) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.feedback_edges = feedback_edges

    @classmethod
    def assign(cls, gir: GraphIR) -> LayerAssignment:
        """Rank nodes by longest path from a source; ties follow caller order."""
        dag, feedback = remove_cycles(gir)
        caller_order: dict[NodeId, int] = {node_id: gir.order_of(node_id) for node_id in dag.nodes}
        layers: dict[NodeId, int] = {node_id: 0 for node_id in dag.nodes}

        for node_id in nx.lexicographical_topological_sort(dag, key=caller_order.__getitem__):
            for succ in dag.successors(node_id):
                if layers[succ] < layers[node_id] + 1:
                    layers[succ] = layers[node_id] + 1

        layer_count = (max(layers.values()) + 1) if layers else 0
        return cls(layers=layers, layer_count=layer_count, feedback_edges=feedback)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class AugmentedGraph:
    """Properly layered graph: every edge joins adjacent layers."""

    graph: nx.MultiDiGraph
    layers: dict[LayerKey, int]
    layer_count: int
    sort_keys: dict[LayerKey, tuple[int, ...]]
    input_counts: dict[LayerKey, int]
    output_counts: dict[LayerKey, int]

    def out_refs(self, node_id: LayerKey) -> list[tuple[LayerKey, Segment]]:
        refs = [(tgt, attrs["segment"]) for _, tgt, attrs in self.graph.out_edges(node_id, data=True)]
        refs.sort(key=lambda r: (r[1].source_index, self.sort_keys[r[0]], r[1].target_index))
        return refs

    def in_refs(self, node_id: LayerKey) -> list[tuple[LayerKey, Segment]]:
        refs = [(src, attrs["segment"]) for src, _, attrs in self.graph.in_edges(node_id, data=True)]
        refs.sort(key=lambda r: (r[1].target_index, self.sort_keys[r[0]], r[1].source_index))
        return refs

    def nodes_in_order(self) -> list[LayerKey]:
        return sorted(self.graph.nodes, key=self.sort_keys.__getitem__)


def insert_dummy_nodes(gir: GraphIR, la: LayerAssignment) -> AugmentedGraph:
    """Split every non-feedback edge spanning several layers into dummy hops."""
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    layers: dict[LayerKey, int] = dict(la.layers)
    sort_keys: dict[LayerKey, tuple[int, ...]] = {}
    input_counts: dict[LayerKey, int] = {}
    output_counts: dict[LayerKey, int] = {}

    for node_id in gir.node_ids():
        data = gir.node_data(node_id)
        g.add_node(node_id)
        sort_keys[node_id] = (0, data.order)
        input_counts[node_id] = data.input_count
        output_counts[node_id] = data.output_count

    feedback_orders = {fe.data.order for fe in la.feedback_edges}
    for src, tgt, data in gir.edges():
        if data.order in feedback_orders:
            continue
        span = layers[tgt] - layers[src]
        if span <= 1:
            g.add_edge(src, tgt, segment=Segment(data.source_index, data.target_index))
            continue

        chain_prev: LayerKey = src
        source_index = data.source_index
        for step in range(span - 1):
            dummy = DummyNode(edge=data.order, step=step)
            g.add_node(dummy)
            layers[dummy] = layers[src] + step + 1
            sort_keys[dummy] = (1, data.order, step)
            input_counts[dummy] = 1
            output_counts[dummy] = 1
            g.add_edge(chain_prev, dummy, segment=Segment(source_index, 0))
            chain_prev = dummy
            source_index = 0
        g.add_edge(chain_prev, tgt, segment=Segment(0, data.target_index))

    return AugmentedGraph(
        graph=g,
        layers=layers,
        layer_count=la.layer_count,
        sort_keys=sort_keys,
        input_counts=input_counts,
        output_counts=output_counts,
    )


# ─── Crossing Minimization ───────────────────────────────────────────────────


def initial_ordering(aug: AugmentedGraph) -> list[list[LayerKey]]:
    """First-appearance order of a breadth-first sweep from the rank-0 nodes."""
    ordering: list[list[LayerKey]] = [[] for _ in range(aug.layer_count)]
    all_nodes = aug.nodes_in_order()
    queue: deque[LayerKey] = deque(n for n in all_nodes if aug.layers[n] == 0)
    seen: set[LayerKey] = set(queue)

    while queue:
        node_id = queue.popleft()
        ordering[aug.layers[node_id]].append(node_id)
        for tgt, _ in aug.out_refs(node_id):
            if tgt not in seen:
                seen.add(tgt)
                queue.append(tgt)

    for node_id in all_nodes:
        if node_id not in seen:
            ordering[aug.layers[node_id]].append(node_id)
    return ordering


def minimise_crossings(aug: AugmentedGraph, max_passes: int = DEFAULT_MAX_PASSES) -> list[list[LayerKey]]:
    """Reorder layers with alternating median sweeps; return the best ordering seen.

    Each pass is one down-sweep followed by one up-sweep. Crossing counts are
    not monotonic across passes, so the lowest-count snapshot wins rather
    than the last one.
    """
    ordering = initial_ordering(aug)
    best = [list(layer) for layer in ordering]
    best_count = count_crossings(ordering, aug)
    stale = 0

    for pass_no in range(max_passes):
        if best_count == 0:
            break
        for layer_idx in range(1, aug.layer_count):
            _reorder_layer(ordering, layer_idx, layer_idx - 1, aug)
        for layer_idx in range(aug.layer_count - 2, -1, -1):
            _reorder_layer(ordering, layer_idx, layer_idx + 1, aug)

        current = count_crossings(ordering, aug)
        logger.debug("crossing pass %d: %d crossings (best %d)", pass_no, current, best_count)
        if current < best_count:
            best_count = current
            best = [list(layer) for layer in ordering]
            stale = 0
        else:
            stale += 1
            if stale >= STALE_PASS_LIMIT:
                logger.debug("no improvement for %d passes, stopping", stale)
                break

    return best


def _reorder_layer(ordering: list[list[LayerKey]], free_idx: int, fixed_idx: int, aug: AugmentedGraph) -> None:
    fixed_pos: dict[LayerKey, int] = {nid: i for i, nid in enumerate(ordering[fixed_idx])}
    downward = fixed_idx < free_idx
    keys: dict[LayerKey, float] = {}
    for current, node_id in enumerate(ordering[free_idx]):
        keys[node_id] = _median_key(node_id, current, fixed_pos, aug, downward)
    ordering[free_idx].sort(key=keys.__getitem__)


def _median_key(
    node_id: LayerKey,
    current: int,
    fixed_pos: dict[LayerKey, int],
    aug: AugmentedGraph,
    downward: bool,
) -> float:
    """Median neighbour position, offset by the neighbour-side port of each edge."""
    values: list[float] = []
    if downward:
        for nb, seg in aug.in_refs(node_id):
            if nb in fixed_pos:
                values.append(fixed_pos[nb] + seg.source_index / aug.output_counts[nb])
    else:
        for nb, seg in aug.out_refs(node_id):
            if nb in fixed_pos:
                values.append(fixed_pos[nb] + seg.target_index / aug.input_counts[nb])

    if not values:
        return float(current)
    values.sort()
    mid = len(values) // 2
    if len(values) % 2 == 1:
        return values[mid]
    return (values[mid - 1] + values[mid]) / 2


def count_crossings(ordering: list[list[LayerKey]], aug: AugmentedGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        total += bilayer_crossings(ordering[l_idx], ordering[l_idx + 1], aug)
    return total


def bilayer_crossings(upper: list[LayerKey], lower: list[LayerKey], aug: AugmentedGraph) -> int:
    """Count strictly inverted edge pairs between two adjacent layers.

    Edge ends are keyed by (node position, port index), so two edges leaving
    one node from different ports cross when their targets are in the
    opposite order. Uses a Fenwick tree: O(E log E).
    """
    lower_pos: dict[LayerKey, int] = {nid: i for i, nid in enumerate(lower)}
    pairs: list[tuple[tuple[int, int], tuple[int, int]]] = []
    for up, src in enumerate(upper):
        if src not in aug.graph:
            continue
        for tgt, seg in aug.out_refs(src):
            if tgt in lower_pos:
                pairs.append(((up, seg.source_index), (lower_pos[tgt], seg.target_index)))
    if len(pairs) < 2:
        return 0

    lower_rank: dict[tuple[int, int], int] = {k: i + 1 for i, k in enumerate(sorted({p[1] for p in pairs}))}
    pairs.sort(key=lambda p: (p[0], lower_rank[p[1]]))

    tree = [0] * (len(lower_rank) + 1)
    crossings = 0
    for inserted, (_, lower_key) in enumerate(pairs):
        rank = lower_rank[lower_key]
        crossings += inserted - _fenwick_prefix(tree, rank)
        _fenwick_add(tree, rank)
    return crossings


def _fenwick_add(tree: list[int], index: int) -> None:
    while index < len(tree):
        tree[index] += 1
        index += index & -index


def _fenwick_prefix(tree: list[int], index: int) -> int:
    total = 0
    while index > 0:
        total += tree[index]
        index -= index & -index
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def assign_coordinates(
    ordering: list[list[LayerKey]],
    gir: GraphIR,
    options: LayoutOptions,
    component: int = 0,
) -> list[LayoutNode]:
    """Assign component-local (x, y) to every real node.

    Layers advance along the flow axis; nodes within a layer are stacked on
    the cross axis, pendant nodes are pulled level with their single
    neighbour, and the cross axis is shifted so the component starts at 0.
    """
    vertical = options.is_vertical
    main_gap = options.gap_y if vertical else options.gap_x
    cross_gap = options.gap_x if vertical else options.gap_y

    def main_size(node_id: NodeId) -> float:
        data = gir.node_data(node_id)
        return data.height if vertical else data.width

    def cross_size(node_id: NodeId) -> float:
        data = gir.node_data(node_id)
        return data.width if vertical else data.height

    real: list[list[NodeId]] = [[n for n in layer if not isinstance(n, DummyNode)] for layer in ordering]

    layer_start: list[float] = []
    main = 0
    for layer_nodes in real:
        layer_start.append(main)
        main += max((main_size(n) for n in layer_nodes), default=0) + main_gap

    baseline: dict[NodeId, float] = {}
    for layer_nodes in real:
        cross = 0
        for node_id in layer_nodes:
            baseline[node_id] = cross
            cross += cross_size(node_id) + cross_gap

    # Pendant smoothing
    cross_pos: dict[NodeId, float] = dict(baseline)
    for node_id in baseline:
        # exactly one incident edge; a self-loop counts twice
        if gir.degree(node_id) == 1:
            nb = gir.neighbors(node_id)[0]
            cross_pos[node_id] = baseline[nb] + (cross_size(nb) - cross_size(node_id)) / 2

    for layer_nodes in real:
        for prev, node_id in zip(layer_nodes, layer_nodes[1:]):
            floor = cross_pos[prev] + cross_size(prev) + cross_gap
            if cross_pos[node_id] < floor:
                cross_pos[node_id] = floor

    if cross_pos:
        min_cross = min(cross_pos.values())
        for node_id in cross_pos:
            cross_pos[node_id] -= min_cross

    nodes: list[LayoutNode] = []
    for layer_idx, layer_nodes in enumerate(real):
        for order, node_id in enumerate(layer_nodes):
            data = gir.node_data(node_id)
            main_coord = layer_start[layer_idx]
            cross_coord = cross_pos[node_id]
            nodes.append(
                LayoutNode(
                    id=node_id,
                    layer=layer_idx,
                    order=order,
                    x=cross_coord if vertical else main_coord,
                    y=main_coord if vertical else cross_coord,
                    width=data.width,
                    height=data.height,
                    component=component,
                )
            )
    return nodes
