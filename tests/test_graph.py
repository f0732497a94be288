"""Tests for node_arrange.ir: input coercion and GraphIR construction."""

import pytest

from node_arrange.errors import LayoutContractError
from node_arrange.ir.graph import EdgeData, GraphIR, NodeData
from node_arrange.ir.model import Edge, Node, Port, coerce_edges, coerce_nodes
from node_arrange.types import PortSide


def _node(id: str, inputs: int = 1, outputs: int = 1) -> Node:
    ports = [Port(name=f"in{i}", side=PortSide.INPUT, index=i) for i in range(inputs)]
    ports += [Port(name=f"out{i}", side=PortSide.OUTPUT, index=i) for i in range(outputs)]
    return Node(id=id, ports=ports)


def _edge(from_id: str, to_id: str, from_port: str = "out0", to_port: str = "in0") -> Edge:
    return Edge.new(from_id, from_port, to_id, to_port)


def _build(nodes: list[Node], edges: list[Edge]) -> GraphIR:
    return GraphIR.build(nodes, edges)


class TestBasicConstruction:
    def test_empty_graph(self):
        gir = _build([], [])
        assert gir.node_count() == 0
        assert gir.edge_count() == 0
        assert gir.components() == []

    def test_single_node(self):
        gir = _build([_node("A")], [])
        assert gir.node_count() == 1
        assert gir.edge_count() == 0

    def test_node_data_stored(self):
        gir = _build([Node(id="A", width=80, height=30)], [])
        data: NodeData = gir.node_data("A")
        assert data.id == "A"
        assert data.order == 0
        assert data.width == 80
        assert data.height == 30

    def test_default_size(self):
        gir = GraphIR.build([Node(id="A")], [], default_width=99, default_height=11)
        data = gir.node_data("A")
        assert (data.width, data.height) == (99, 11)

    def test_edge_data_stores_port_indices(self):
        gir = _build([_node("A", outputs=3), _node("B", inputs=2)], [_edge("A", "B", "out2", "in1")])
        [(src, tgt, data)] = gir.edges()
        assert (src, tgt) == ("A", "B")
        assert isinstance(data, EdgeData)
        assert data.source_index == 2
        assert data.target_index == 1

    def test_node_order_follows_caller(self):
        gir = _build([_node("C"), _node("A"), _node("B")], [])
        assert gir.node_ids() == ["C", "A", "B"]


class TestDataAnomalies:
    def test_dangling_edge_dropped(self):
        gir = _build([_node("A")], [_edge("A", "Z"), _edge("Y", "A")])
        assert gir.edge_count() == 0
        assert gir.dropped_edges == 2

    def test_duplicate_edge_deduplicated(self):
        gir = _build([_node("A"), _node("B")], [_edge("A", "B"), _edge("A", "B")])
        assert gir.edge_count() == 1
        assert gir.duplicate_edges == 1

    def test_same_nodes_different_ports_kept(self):
        nodes = [_node("A", outputs=2), _node("B")]
        gir = _build(nodes, [_edge("A", "B", "out0"), _edge("A", "B", "out1")])
        assert gir.edge_count() == 2

    def test_undeclared_port_resolves_to_zero(self):
        gir = _build([_node("A", outputs=2), _node("B")], [_edge("A", "B", "nope", "missing")])
        [(_, _, data)] = gir.edges()
        assert data.source_index == 0
        assert data.target_index == 0


class TestAdjacency:
    def test_outgoing_grouped_by_port(self):
        nodes = [_node("A", outputs=2), _node("B"), _node("C")]
        edges = [_edge("A", "C", "out1"), _edge("A", "B", "out0"), _edge("A", "C", "out0")]
        gir = _build(nodes, edges)
        grouped = gir.outgoing_by_port("A")
        assert list(grouped) == [0, 1]
        assert [tgt for tgt, _ in grouped[0]] == ["B", "C"]
        assert [tgt for tgt, _ in grouped[1]] == ["C"]

    def test_incoming_grouped_by_port(self):
        nodes = [_node("A"), _node("B"), _node("C", inputs=2)]
        edges = [_edge("B", "C", "out0", "in1"), _edge("A", "C", "out0", "in0")]
        gir = _build(nodes, edges)
        grouped = gir.incoming_by_port("C")
        assert [src for src, _ in grouped[0]] == ["A"]
        assert [src for src, _ in grouped[1]] == ["B"]

    def test_neighbors_distinct_and_ordered(self):
        nodes = [_node("A"), _node("B"), _node("C")]
        edges = [_edge("B", "A"), _edge("A", "C"), _edge("C", "A"), _edge("A", "A")]
        gir = _build(nodes, edges)
        assert gir.neighbors("A") == ["B", "C"]

    def test_components_in_discovery_order(self):
        nodes = [_node(n) for n in ["D", "A", "E", "B", "F"]]
        edges = [_edge("A", "B"), _edge("D", "E")]
        gir = _build(nodes, edges)
        assert gir.components() == [["D", "E"], ["A", "B"], ["F"]]

    def test_subgraph_keeps_order_and_edges(self):
        nodes = [_node(n) for n in ["A", "B", "C"]]
        gir = _build(nodes, [_edge("A", "B"), _edge("B", "C")])
        sub = gir.subgraph(["C", "B"])
        assert sub.node_ids() == ["B", "C"]
        assert [(s, t) for s, t, _ in sub.edges()] == [("B", "C")]


class TestCoercion:
    def test_mapping_nodes_with_ports(self):
        [node] = coerce_nodes(
            [
                {
                    "id": "A",
                    "width": 120,
                    "ports": [
                        {"name": "x", "side": "input"},
                        {"name": "y", "side": "input"},
                        {"name": "out", "side": "output", "index": 0},
                    ],
                }
            ]
        )
        assert node.width == 120
        assert node.port_index(PortSide.INPUT, "y") == 1
        assert node.port_count(PortSide.INPUT) == 2
        assert node.port_count(PortSide.OUTPUT) == 1

    def test_inputs_outputs_lists(self):
        [node] = coerce_nodes([{"id": "A", "inputs": ["a", "b"], "outputs": [{"name": "r"}]}])
        assert node.port_index(PortSide.INPUT, "b") == 1
        assert node.port_index(PortSide.OUTPUT, "r") == 0

    def test_hint_position_read(self):
        [node] = coerce_nodes([{"id": 7, "position": {"x": 3, "y": 4}}])
        assert (node.x, node.y) == (3, 4)

    def test_edge_shapes(self):
        edges = coerce_edges(
            [
                {"from": {"nodeId": "A", "portName": "o"}, "to": {"nodeId": "B", "portName": "i"}},
                {"fromNodeId": "A", "fromPortName": "o", "toNodeId": "B", "toPortName": "i"},
                {"source": "A", "sourceHandle": "o", "target": "B", "targetHandle": "i"},
            ]
        )
        assert len({e.key for e in edges}) == 1
        assert edges[0].key == ("A", "o", "B", "i")

    def test_edge_without_endpoint_is_dangling(self):
        [edge] = coerce_edges([{"from": {"nodeId": "A"}}])
        gir = GraphIR.build(coerce_nodes([{"id": "A"}]), [edge])
        assert gir.edge_count() == 0
        assert gir.dropped_edges == 1

    @pytest.mark.parametrize(
        "nodes",
        [None, "AB", {"id": "A"}, 3],
        ids=["none", "string", "mapping", "int"],
    )
    def test_nodes_must_be_sequence(self, nodes):
        with pytest.raises(LayoutContractError, match="nodes must be a list"):
            coerce_nodes(nodes)

    def test_node_without_id(self):
        with pytest.raises(LayoutContractError, match=r"nodes\[0\]\.id"):
            coerce_nodes([{"width": 10}])

    def test_node_bad_width(self):
        with pytest.raises(LayoutContractError, match="width"):
            coerce_nodes([{"id": "A", "width": "wide"}])

    def test_duplicate_node_id(self):
        with pytest.raises(LayoutContractError, match="duplicate"):
            coerce_nodes([{"id": "A"}, {"id": "A"}])

    def test_edge_element_must_be_mapping(self):
        with pytest.raises(LayoutContractError, match=r"edges\[1\]"):
            coerce_edges([{"source": "A", "target": "B"}, ("A", "B")])

    def test_edge_endpoint_id_type(self):
        with pytest.raises(LayoutContractError, match="node id"):
            coerce_edges([{"source": ["A"], "target": "B"}])

    def test_contract_error_is_type_error(self):
        assert issubclass(LayoutContractError, TypeError)

    @pytest.mark.parametrize(
        "port",
        [{"name": "o", "side": "output", "index": -1}, {"name": "o", "side": "output", "index": 1.0}],
        ids=["negative", "float"],
    )
    def test_port_index_must_be_non_negative_int(self, port):
        with pytest.raises(LayoutContractError, match=r"nodes\[0\]\.ports\[0\]\.index"):
            coerce_nodes([{"id": "A", "ports": [port]}])

    def test_port_object_index_checked(self):
        node = Node(id="A", ports=[Port(name="o", side=PortSide.OUTPUT, index=-2)])
        with pytest.raises(LayoutContractError, match="index"):
            coerce_nodes([node])

    def test_port_object_in_mapping_checked(self):
        with pytest.raises(LayoutContractError, match="index"):
            coerce_nodes([{"id": "A", "ports": [Port(name="o", side=PortSide.INPUT, index=-1)]}])

    @pytest.mark.parametrize("width", [float("nan"), float("inf"), -5])
    def test_node_size_must_be_positive_finite(self, width):
        with pytest.raises(LayoutContractError, match="width"):
            coerce_nodes([{"id": "A", "width": width}])


class TestPorts:
    def test_port_count_at_least_one(self):
        node = Node(id="A", ports=[Port(name="o", side=PortSide.OUTPUT, index=-1)])
        assert node.port_count(PortSide.OUTPUT) == 1
        assert node.port_count(PortSide.INPUT) == 1

    def test_unnamed_port_never_matched(self):
        [node] = coerce_nodes([{"id": "A", "ports": [{"name": "a", "side": "output"}, {"side": "output"}]}])
        assert node.port_count(PortSide.OUTPUT) == 2
        assert node.port_index(PortSide.OUTPUT, None) == 0
        assert node.port_index(PortSide.OUTPUT, "a") == 0

    def test_edge_without_port_uses_index_zero(self):
        nodes = coerce_nodes([{"id": "A", "ports": [{"name": "a", "side": "output"}, {"side": "output"}]}, {"id": "B"}])
        gir = GraphIR.build(nodes, [Edge.new("A", None, "B", None)])
        [(_, _, data)] = gir.edges()
        assert data.source_index == 0

    def test_degree_counts_parallel_port_edges(self):
        nodes = [_node("A", outputs=2), _node("B", inputs=2), _node("C")]
        edges = [_edge("A", "B", "out0", "in0"), _edge("A", "B", "out1", "in1"), _edge("A", "C")]
        gir = _build(nodes, edges)
        assert gir.degree("B") == 2
        assert gir.degree("C") == 1
        assert gir.neighbors("B") == ["A"]
