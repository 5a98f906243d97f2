"""
Data models for diagram layout and animation.

This module contains the dataclasses produced by the per-dialect parsers.
Every parsed diagram is one variant of ``ParsedDiagram``, tagged with its
``DiagramDialect`` so the sequencer and renderers can dispatch on it once.

Classes:
    DiagramDialect: The fixed set of recognized diagram sub-languages.
    NodeShape: Shapes a flowchart node can be drawn with.
    LineStyle: Solid or dashed sequence message lines.
    Point: A 2-D coordinate.
    Node, Edge: Flowchart elements.
    SequenceActor, SequenceMessage: Sequence diagram elements.
    PieSegment: A slice of a pie chart.
    StateNode, StateTransition: State diagram elements.
    MindmapNode, MindmapConnection: Mindmap elements.
    FlowchartDiagram, SequenceDiagram, PieChart, StateDiagram,
    MindmapDiagram, UnsupportedDiagram: The parsed diagram variants.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class DiagramDialect(str, Enum):
    """Diagram sub-language, determined once from the diagram text."""

    FLOWCHART = "flowchart"
    SEQUENCE = "sequence"
    PIE = "pie"
    STATE = "state"
    MINDMAP = "mindmap"
    UNKNOWN = "unknown"


class NodeShape(str, Enum):
    RECT = "rect"
    ROUNDED = "rounded"
    DIAMOND = "diamond"
    CIRCLE = "circle"


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"


# Reserved identifiers for the synthetic state diagram markers
STATE_START_ID = "[*]start"
STATE_END_ID = "[*]end"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Node:
    """
    A flowchart node.

    Attributes:
        id: Identifier from the diagram source, unique within one diagram.
        label: Display text.
        x: Center x coordinate.
        y: Center y coordinate.
        width: Bounding box width.
        height: Bounding box height.
        shape: Drawing shape.
    """

    id: str
    label: str
    x: float
    y: float
    width: float
    height: float
    shape: NodeShape = NodeShape.RECT


@dataclass(frozen=True)
class Edge:
    """
    A flowchart edge routed as a polyline.

    Attributes:
        source: Source node id.
        target: Target node id.
        points: Route points from source boundary to target boundary (2-4).
        label: Optional text written on the arrow.
    """

    source: str
    target: str
    points: Tuple[Point, ...]
    label: Optional[str] = None


@dataclass(frozen=True)
class SequenceActor:
    """A participant occupying one vertical lane."""

    id: str
    name: str
    x: float


@dataclass(frozen=True)
class SequenceMessage:
    """
    A message arrow between two actor lanes.

    Attributes:
        source: Index of the sending actor.
        target: Index of the receiving actor.
        text: Message text.
        y: Vertical position, strictly increasing in message order.
        style: Dashed for reply arrows, solid otherwise.
    """

    source: int
    target: int
    text: str
    y: float
    style: LineStyle = LineStyle.SOLID


@dataclass(frozen=True)
class PieSegment:
    """A pie slice; angles are radians, clockwise with y pointing down."""

    label: str
    value: float
    color: str
    start_angle: float
    end_angle: float

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle


@dataclass(frozen=True)
class StateNode:
    """
    A state placed on a layered left-to-right layout.

    Attributes:
        id: State identifier, or one of the reserved marker ids.
        label: Display text (empty for start/end markers).
        x: Center x coordinate.
        y: Center y coordinate.
        level: Breadth-first depth from the start set.
        is_start: True for the synthetic start marker.
        is_end: True for the synthetic end marker.
    """

    id: str
    label: str
    x: float
    y: float
    level: int = 0
    is_start: bool = False
    is_end: bool = False

    @property
    def marker(self) -> Optional[str]:
        """Marker style: "filled" for start, "double_ring" for end."""
        if self.is_start:
            return "filled"
        if self.is_end:
            return "double_ring"
        return None


@dataclass(frozen=True)
class StateTransition:
    source: str
    target: str
    label: Optional[str] = None


@dataclass(frozen=True)
class MindmapNode:
    """
    A mindmap node placed radially around the root.

    Attributes:
        id: Generated identifier ("node-<n>", in line order).
        label: Display text.
        level: Depth in the tree, 0 for the root.
        x: Center x coordinate.
        y: Center y coordinate.
        parent_id: Identifier of the parent node, if any.
        is_root: True for depth-0 nodes.
        branch_angle: Direction used to fan out this node's children.
    """

    id: str
    label: str
    level: int
    x: float
    y: float
    parent_id: Optional[str] = None
    is_root: bool = False
    branch_angle: float = 0.0


@dataclass(frozen=True)
class MindmapConnection:
    """Always parent -> child."""

    source: str
    target: str


@dataclass(frozen=True)
class FlowchartDiagram:
    dialect: ClassVar[DiagramDialect] = DiagramDialect.FLOWCHART

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    view_width: float = 800.0
    view_height: float = 600.0


@dataclass(frozen=True)
class SequenceDiagram:
    dialect: ClassVar[DiagramDialect] = DiagramDialect.SEQUENCE

    actors: Tuple[SequenceActor, ...] = ()
    messages: Tuple[SequenceMessage, ...] = ()
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class PieChart:
    dialect: ClassVar[DiagramDialect] = DiagramDialect.PIE

    title: str = ""
    segments: Tuple[PieSegment, ...] = ()


@dataclass(frozen=True)
class StateDiagram:
    dialect: ClassVar[DiagramDialect] = DiagramDialect.STATE

    nodes: Tuple[StateNode, ...] = ()
    transitions: Tuple[StateTransition, ...] = ()


@dataclass(frozen=True)
class MindmapDiagram:
    dialect: ClassVar[DiagramDialect] = DiagramDialect.MINDMAP

    nodes: Tuple[MindmapNode, ...] = ()
    connections: Tuple[MindmapConnection, ...] = ()


@dataclass(frozen=True)
class UnsupportedDiagram:
    """Terminal state for text whose dialect is not recognized."""

    dialect: DiagramDialect = DiagramDialect.UNKNOWN
    reason: str = field(default="unsupported diagram type")


ParsedDiagram = Union[
    FlowchartDiagram,
    SequenceDiagram,
    PieChart,
    StateDiagram,
    MindmapDiagram,
    UnsupportedDiagram,
]
