"""
mermaid-reel - Animated Mermaid Diagram Layouts

Turns Mermaid flowcharts, sequence diagrams, pie charts, state diagrams and
mindmaps into deterministic layouts with a per-element reveal schedule for
frame-by-frame animation.

Example:
    >>> from mermaidreel import AnimationGenerator
    >>> generator = AnimationGenerator(frames_per_element=20)
    >>> animation = generator.generate('''stateDiagram-v2
    ...     [*] --> Idle
    ...     Idle --> Done
    ...     Done --> [*]''')
    >>> animation.frame_state(40).progress_label
    '3 / 7 elements'

Flowcharts need node geometry from the Mermaid renderer:
    >>> animation = await generator.agenerate("flowchart TD\\n A --> B")
"""

from .classifier import classify_dialect
from .export import DiagramExporter, read_diagram_file
from .generator import AnimatedDiagram, AnimationGenerator
from .geometry import (
    FlowchartGeometry,
    GeometryError,
    MermaidCliGeometrySource,
    NodeGeometry,
    StaticGeometrySource,
    SvgGeometrySource,
    parse_flowchart_svg,
)
from .models import (
    DiagramDialect,
    FlowchartDiagram,
    MindmapDiagram,
    ParsedDiagram,
    PieChart,
    SequenceDiagram,
    StateDiagram,
    UnsupportedDiagram,
)
from .parser import ParseError, aparse_diagram, parse_diagram
from .png_renderer import FrameRenderer
from .sequencer import (
    EntryKind,
    FadeTimeline,
    FrameState,
    RevealSchedule,
    SequenceEntry,
)
from .session import LayoutSession
from .tracer import PipelineStage, RenderTrace

__version__ = "0.1.0"

__all__ = [
    # Main API
    "AnimationGenerator",
    "AnimatedDiagram",
    # Parsing
    "classify_dialect",
    "parse_diagram",
    "aparse_diagram",
    "ParseError",
    # Models
    "DiagramDialect",
    "ParsedDiagram",
    "FlowchartDiagram",
    "SequenceDiagram",
    "PieChart",
    "StateDiagram",
    "MindmapDiagram",
    "UnsupportedDiagram",
    # Geometry
    "FlowchartGeometry",
    "NodeGeometry",
    "GeometryError",
    "StaticGeometrySource",
    "SvgGeometrySource",
    "MermaidCliGeometrySource",
    "parse_flowchart_svg",
    "LayoutSession",
    # Sequencing
    "RevealSchedule",
    "SequenceEntry",
    "EntryKind",
    "FrameState",
    "FadeTimeline",
    # Output
    "FrameRenderer",
    "DiagramExporter",
    "read_diagram_file",
    # Debug/Tracing
    "RenderTrace",
    "PipelineStage",
]
