"""Unit tests for flowchart edge recovery and layout."""

from mermaidreel.flowchart import (
    DETOUR_OFFSET_X,
    DETOUR_OFFSET_Y,
    EdgeFact,
    layout_flowchart,
    route_edge,
    scan_edges,
    scan_line,
)
from mermaidreel.geometry import FlowchartGeometry, NodeGeometry
from mermaidreel.models import FlowchartDiagram, NodeShape, Point


class TestScanLine:
    """Tests for tokenizing one flowchart line."""

    def test_simple_edge(self):
        edges, labels = scan_line("    A-->B")
        assert edges == [EdgeFact("A", "B", None)]
        assert labels == {}

    def test_chain(self):
        """N arrows on one line give N edges."""
        edges, _ = scan_line("A --> B --> C")
        assert [(e.source, e.target) for e in edges] == [("A", "B"), ("B", "C")]

    def test_arrow_label(self):
        edges, _ = scan_line("B -->|Yes| C[Fetch data]")
        assert edges == [EdgeFact("B", "C", "Yes")]

    def test_label_bound_to_its_arrow(self):
        edges, _ = scan_line("A --> B -->|no| C")
        assert edges[0].label is None
        assert edges[1].label == "no"

    def test_blank_label_is_none(self):
        edges, _ = scan_line("A -->| | B")
        assert edges[0].label is None

    def test_bracketed_labels(self):
        _, labels = scan_line('A[Start] --> B{Check?} --> C(("Done"))')
        assert labels == {"A": "Start", "B": "Check?", "C": "Done"}

    def test_arrow_variants(self):
        for arrow in ("-->", "--->", "==>", "-.->", "---", "-.-"):
            edges, _ = scan_line(f"A {arrow} B")
            assert [(e.source, e.target) for e in edges] == [("A", "B")], arrow

    def test_dotted_arrow_not_split(self):
        edges, _ = scan_line("A -.-> B")
        assert len(edges) == 1

    def test_non_edge_lines(self):
        assert scan_line("flowchart TD") == ([], {})
        assert scan_line("") == ([], {})


class TestScanEdges:
    def test_first_label_wins(self):
        edges, labels = scan_edges("flowchart TD\n A[One] --> B\n A[Two] --> C")
        assert labels["A"] == "One"
        assert len(edges) == 2


class TestRouteEdge:
    """Tests for boundary-to-boundary routing."""

    def test_downward(self):
        a = NodeGeometry("A", "", 100, 50, 100, 40)
        b = NodeGeometry("B", "", 100, 150, 100, 40)
        assert route_edge(a, b) == (Point(100, 70), Point(100, 130))

    def test_upward_detours_right(self):
        a = NodeGeometry("A", "", 100, 50, 100, 40)
        b = NodeGeometry("B", "", 100, 150, 100, 40)
        points = route_edge(b, a)
        assert len(points) == 4
        assert points[0] == Point(150, 150)
        assert points[1] == Point(150 + DETOUR_OFFSET_X, 150 - DETOUR_OFFSET_Y)
        assert points[2] == Point(150 + DETOUR_OFFSET_X, 70 + DETOUR_OFFSET_Y)
        assert points[3] == Point(150, 70)

    def test_rightward(self):
        a = NodeGeometry("A", "", 0, 0, 100, 40)
        b = NodeGeometry("B", "", 300, 10, 80, 40)
        assert route_edge(a, b) == (Point(50, 0), Point(260, 10))

    def test_leftward(self):
        a = NodeGeometry("A", "", 300, 0, 100, 40)
        b = NodeGeometry("B", "", 0, 0, 80, 40)
        assert route_edge(a, b) == (Point(250, 0), Point(40, 0))


class TestLayoutFlowchart:
    """Tests for combining geometry with text edges."""

    def test_two_nodes(self, simple_flowchart, simple_geometry):
        diagram = layout_flowchart(simple_flowchart, simple_geometry)
        assert [n.id for n in diagram.nodes] == ["A", "B"]
        assert len(diagram.edges) == 1
        assert (diagram.edges[0].source, diagram.edges[0].target) == ("A", "B")
        assert (diagram.view_width, diagram.view_height) == (200, 200)

    def test_geometry_label_and_shape(self, simple_flowchart, simple_geometry):
        diagram = layout_flowchart(simple_flowchart, simple_geometry)
        assert diagram.nodes[0].label == "Start"
        assert diagram.nodes[1].shape is NodeShape.ROUNDED

    def test_text_label_fallback(self, branching_flowchart, branching_geometry):
        diagram = layout_flowchart(branching_flowchart, branching_geometry)
        labels = {n.id: n.label for n in diagram.nodes}
        assert labels["A"] == "User request"
        assert labels["B"] == "Authenticated?"

    def test_id_fallback(self):
        geometry = FlowchartGeometry.from_nodes(
            [NodeGeometry("A", "", 0, 0), NodeGeometry("B", "", 0, 100)]
        )
        diagram = layout_flowchart("flowchart TD\n A --> B", geometry)
        assert [n.label for n in diagram.nodes] == ["A", "B"]

    def test_edges_without_geometry_dropped(self, simple_geometry):
        diagram = layout_flowchart("flowchart TD\n A --> B\n B --> Z", simple_geometry)
        assert [(e.source, e.target) for e in diagram.edges] == [("A", "B")]

    def test_nodes_without_edges_kept(self):
        geometry = FlowchartGeometry.from_nodes(
            [NodeGeometry("A", "", 0, 100), NodeGeometry("B", "", 0, 0)]
        )
        diagram = layout_flowchart("flowchart TD\n A\n B", geometry)
        assert [n.id for n in diagram.nodes] == ["B", "A"]
        assert diagram.edges == ()

    def test_no_geometry_is_empty(self, simple_flowchart):
        assert layout_flowchart(simple_flowchart, None) == FlowchartDiagram()

    def test_edge_labels(self, branching_flowchart, branching_geometry):
        diagram = layout_flowchart(branching_flowchart, branching_geometry)
        labeled = {(e.source, e.target): e.label for e in diagram.edges if e.label}
        assert labeled == {
            ("B", "C"): "Yes",
            ("B", "D"): "No",
            ("F", "G"): "Yes",
            ("F", "H"): "No",
        }

    def test_every_node_once(self, branching_flowchart, branching_geometry):
        diagram = layout_flowchart(branching_flowchart, branching_geometry)
        ids = [n.id for n in diagram.nodes]
        assert sorted(ids) == sorted(branching_geometry.nodes)
        assert ids[0] == "A"
        assert len(diagram.edges) == 11

    def test_edges_sorted_by_rank(self, branching_flowchart, branching_geometry):
        diagram = layout_flowchart(branching_flowchart, branching_geometry)
        rank = {n.id: i for i, n in enumerate(diagram.nodes)}
        keys = [(rank[e.source], rank[e.target]) for e in diagram.edges]
        assert keys == sorted(keys)

    def test_acyclic_order_is_topological(self):
        geometry = FlowchartGeometry.from_nodes(
            [
                NodeGeometry("D", "", 0, 300),
                NodeGeometry("C", "", 100, 200),
                NodeGeometry("B", "", 0, 100),
                NodeGeometry("A", "", 0, 0),
            ]
        )
        text = "flowchart TD\n A --> B\n A --> C\n B --> D\n C --> D"
        diagram = layout_flowchart(text, geometry)
        assert [n.id for n in diagram.nodes] == ["A", "B", "C", "D"]
