"""
Main animation generator module.

Combines classification, parsing/layout, and sequencing to turn diagram
text into a timed, per-element reveal.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .classifier import classify_dialect
from .geometry import FlowchartGeometry, GeometrySource, MermaidCliGeometrySource
from .models import DiagramDialect, ParsedDiagram, UnsupportedDiagram
from .parser import aparse_diagram, parse_diagram
from .sequencer import (
    DEFAULT_FRAMES_PER_ELEMENT,
    EntryKind,
    FrameState,
    RevealSchedule,
)
from .tracer import RenderTrace


@dataclass(frozen=True)
class AnimatedDiagram:
    """A parsed diagram together with its reveal schedule."""

    diagram: ParsedDiagram
    schedule: RevealSchedule

    @property
    def dialect(self) -> DiagramDialect:
        return self.diagram.dialect

    @property
    def supported(self) -> bool:
        return not isinstance(self.diagram, UnsupportedDiagram)

    def frame_state(self, frame: int) -> FrameState:
        return self.schedule.frame_state(frame)

    def opacity_of(self, kind: EntryKind, index: int, frame: int) -> float:
        """Opacity of the ``index``-th element of ``kind`` at ``frame``."""
        entry = self.schedule.entry_for(kind, index)
        return 0.0 if entry is None else self.schedule.opacity(entry, frame)


def _describe(diagram: ParsedDiagram) -> Dict[str, Any]:
    """Element lists for the debug trace."""
    data: Dict[str, Any] = {"type": type(diagram).__name__}
    for name in ("nodes", "edges", "actors", "messages", "segments",
                 "transitions", "connections"):
        elements = getattr(diagram, name, None)
        if elements is not None:
            data[name] = list(elements)
    if hasattr(diagram, "title"):
        data["title"] = diagram.title
    return data


class AnimationGenerator:
    """
    Generate per-element animation schedules from diagram text.

    Example:
        >>> generator = AnimationGenerator(frames_per_element=25)
        >>> animation = generator.generate('''pie title Pets
        ...     "Dogs" : 60
        ...     "Cats" : 40''')
        >>> animation.frame_state(30).progress_label
        '2 / 3 elements'
    """

    def __init__(
        self,
        frames_per_element: int = DEFAULT_FRAMES_PER_ELEMENT,
        geometry_source: Optional[GeometrySource] = None,
    ):
        """
        Initialize the generator.

        Args:
            frames_per_element: Frames between consecutive reveals.
            geometry_source: Renderer used by agenerate() for flowchart
                geometry; defaults to the Mermaid CLI.
        """
        if frames_per_element <= 0:
            raise ValueError("frames_per_element must be positive")
        self.frames_per_element = frames_per_element
        self.geometry_source = geometry_source
        self._trace: Optional[RenderTrace] = None

    def _finish(
        self, diagram_text: str, diagram: ParsedDiagram, debug: bool
    ) -> AnimatedDiagram:
        schedule = RevealSchedule.for_diagram(diagram, self.frames_per_element)

        if debug:
            trace = RenderTrace(
                input_text=diagram_text,
                dialect=classify_dialect(diagram_text).value,
            )
            trace.add_stage("classify", {"dialect": trace.dialect})
            trace.add_stage("parse", _describe(diagram))
            trace.add_stage(
                "schedule",
                {
                    "frames_per_element": self.frames_per_element,
                    "total": schedule.total,
                    "order": [(e.kind.value, e.index) for e in schedule.entries],
                },
            )
            self._trace = trace
        else:
            self._trace = None

        return AnimatedDiagram(diagram, schedule)

    def generate(
        self,
        diagram_text: str,
        geometry: Optional[FlowchartGeometry] = None,
        debug: bool = False,
    ) -> AnimatedDiagram:
        """
        Parse and sequence diagram text synchronously.

        Args:
            diagram_text: Raw diagram text.
            geometry: Pre-rendered flowchart geometry (flowcharts only).
            debug: If True, capture a RenderTrace retrievable via get_trace().

        Returns:
            AnimatedDiagram for the text.
        """
        return self._finish(
            diagram_text, parse_diagram(diagram_text, geometry), debug
        )

    async def agenerate(
        self, diagram_text: str, debug: bool = False
    ) -> AnimatedDiagram:
        """Like generate(), rendering flowchart geometry via the source."""
        if self.geometry_source is None:
            self.geometry_source = MermaidCliGeometrySource()
        diagram = await aparse_diagram(diagram_text, self.geometry_source)
        return self._finish(diagram_text, diagram, debug)

    def get_trace(self) -> Optional[RenderTrace]:
        """Trace of the last generate call, or None if debug was off."""
        return self._trace
