"""
Flowchart parsing and layout.

Node positions come from the Mermaid-rendered geometry; edges are recovered
from the diagram text because the rendered SVG does not reliably expose
which nodes an edge path connects.

Each line is tokenized into alternating node references and arrow tokens::

    A[Start] -->|go| B{Check} --> C

yields the edges A -> B (label "go") and B -> C.
"""

import logging
import re
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from .geometry import FlowchartGeometry, NodeGeometry
from .layout import build_graph, topological_order
from .models import Edge, FlowchartDiagram, Node, Point

logger = logging.getLogger(__name__)

# Lateral and vertical clearance of the detour taken by upward edges
DETOUR_OFFSET_X = 50.0
DETOUR_OFFSET_Y = 30.0

# Plain arrow, thick arrow, dotted arrow, plain line, dotted line.
# An arrow may carry a label written as -->|label|.
ARROW_RE = re.compile(r"(-{2,}>|={2,}>|-\.+->|-{3,}|-\.+-)(?:\|([^|]*)\|)?")
NODE_ID_RE = re.compile(r"^\s*(\w+)")
NODE_LABEL_RE = re.compile(
    r"^\s*(\w+)\s*(?:\(\((.*?)\)\)|\[(.*?)\]|\{(.*?)\}|\((.*?)\))"
)


class EdgeFact(NamedTuple):
    """An edge as written in the text, before geometry is attached."""

    source: str
    target: str
    label: Optional[str]


def _segment_label(segment: str) -> Optional[Tuple[str, str]]:
    match = NODE_LABEL_RE.match(segment)
    if not match:
        return None
    text = next(g for g in match.groups()[1:] if g is not None)
    return match.group(1), text.strip().strip('"')


def scan_line(line: str) -> Tuple[List[EdgeFact], Dict[str, str]]:
    """
    Tokenize one line into edge facts and bracketed node labels.

    A line with N arrow tokens describes a chain of N edges. Segments that
    do not start with an identifier are skipped without breaking the chain.

    Returns:
        Tuple of (edges on this line, {node id: label text}).
    """
    parts = ARROW_RE.split(line)
    segments = parts[0::3]
    arrow_labels = parts[2::3]

    edges: List[EdgeFact] = []
    labels: Dict[str, str] = {}
    current: Optional[str] = None

    for i, segment in enumerate(segments):
        labeled = _segment_label(segment)
        if labeled:
            labels.setdefault(*labeled)

        match = NODE_ID_RE.match(segment)
        if not match:
            continue
        node_id = match.group(1)
        if current is not None:
            label = arrow_labels[i - 1]
            label = label.strip() if label and label.strip() else None
            edges.append(EdgeFact(current, node_id, label))
        current = node_id

    return edges, labels


def scan_edges(diagram: str) -> Tuple[List[EdgeFact], Dict[str, str]]:
    """Collect edge facts and text labels over every line of the diagram."""
    edges: List[EdgeFact] = []
    labels: Dict[str, str] = {}
    for line in diagram.split("\n"):
        line_edges, line_labels = scan_line(line)
        edges.extend(line_edges)
        for node_id, text in line_labels.items():
            labels.setdefault(node_id, text)
    return edges, labels


def route_edge(source: NodeGeometry, target: NodeGeometry) -> Tuple[Point, ...]:
    """
    Compute a polyline from the source boundary to the target boundary.

    Mostly-vertical edges run straight down; upward ("back") edges detour
    around the right side of both nodes. Mostly-horizontal edges run
    between the facing sides.
    """
    dx = target.x - source.x
    dy = target.y - source.y

    if abs(dy) > abs(dx):
        if dy > 0:
            return (
                Point(source.x, source.y + source.height / 2),
                Point(target.x, target.y - target.height / 2),
            )
        source_right = source.x + source.width / 2
        target_right = target.x + target.width / 2
        return (
            Point(source_right, source.y),
            Point(source_right + DETOUR_OFFSET_X, source.y - DETOUR_OFFSET_Y),
            Point(
                target_right + DETOUR_OFFSET_X,
                target.y + target.height / 2 + DETOUR_OFFSET_Y,
            ),
            Point(target_right, target.y + target.height / 2),
        )

    if dx > 0:
        return (
            Point(source.x + source.width / 2, source.y),
            Point(target.x - target.width / 2, target.y),
        )
    return (
        Point(source.x - source.width / 2, source.y),
        Point(target.x + target.width / 2, target.y),
    )


def _to_node(geometry: NodeGeometry, text_labels: Mapping[str, str]) -> Node:
    label = geometry.label or text_labels.get(geometry.id) or geometry.id
    return Node(
        id=geometry.id,
        label=label,
        x=geometry.x,
        y=geometry.y,
        width=geometry.width,
        height=geometry.height,
        shape=geometry.shape,
    )


def layout_flowchart(
    diagram: str, geometry: Optional[FlowchartGeometry]
) -> FlowchartDiagram:
    """
    Combine rendered node geometry with edges recovered from the text.

    Nodes are ordered topologically (ties broken top to bottom); edges are
    ordered by the rank of their source, then their target.

    Args:
        diagram: Flowchart text.
        geometry: Rendered node geometry, or None if rendering failed.

    Returns:
        FlowchartDiagram; empty when no geometry is available.
    """
    if geometry is None:
        logger.warning("No flowchart geometry available; nothing to show")
        return FlowchartDiagram()

    by_id = geometry.nodes
    facts, text_labels = scan_edges(diagram)

    edges: List[Edge] = []
    for fact in facts:
        source = by_id.get(fact.source)
        target = by_id.get(fact.target)
        if source is None or target is None:
            logger.debug("Dropping edge %s -> %s", fact.source, fact.target)
            continue
        edges.append(
            Edge(fact.source, fact.target, route_edge(source, target), fact.label)
        )

    graph = build_graph(by_id, ((e.source, e.target) for e in edges))
    order = topological_order(graph, sort_key=lambda node_id: by_id[node_id].y)
    nodes = tuple(_to_node(by_id[node_id], text_labels) for node_id in order)

    rank = {node.id: i for i, node in enumerate(nodes)}
    ordered_edges = tuple(
        sorted(edges, key=lambda e: (rank[e.source], rank[e.target]))
    )

    logger.debug("Flowchart nodes: %s", [n.id for n in nodes])
    logger.debug(
        "Flowchart edges: %s", [(e.source, e.target) for e in ordered_edges]
    )

    return FlowchartDiagram(
        nodes=nodes,
        edges=ordered_edges,
        view_width=geometry.view_width,
        view_height=geometry.view_height,
    )
