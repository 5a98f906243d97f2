"""
Animation sequencing for parsed diagrams.

Every element of a parsed diagram gets one slot in a single global reveal
order. An element starts fading in at ``reveal_index * frames_per_element``
and is fully opaque half a step later.

Slot orders per dialect:
    flowchart: node 0, edge 0, node 1, edge 1, ... (shorter list skipped
        once exhausted)
    sequence: actors, then messages
    pie: title, then segments
    state: states, then transitions
    mindmap: nodes, then connections; a connection is revealed together
        with the later of its two endpoints
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from .models import (
    FlowchartDiagram,
    MindmapDiagram,
    ParsedDiagram,
    PieChart,
    SequenceDiagram,
    StateDiagram,
    UnsupportedDiagram,
)

DEFAULT_FRAMES_PER_ELEMENT = 20

# Fraction of one step spent fading an element in
FADE_FRACTION = 0.5


class EntryKind(str, Enum):
    NODE = "node"
    EDGE = "edge"
    ACTOR = "actor"
    MESSAGE = "message"
    TITLE = "title"
    SEGMENT = "segment"
    STATE = "state"
    TRANSITION = "transition"
    CONNECTION = "connection"


@dataclass(frozen=True)
class SequenceEntry:
    """
    One element's place in the reveal order.

    Attributes:
        slot: Position in the global order (0-based, gapless, unique).
        kind: What sort of element this is.
        index: Index of the element within its own list in the diagram.
        element: The element itself (the title string for pie titles).
        reveal_index: Ordinal whose frame starts the fade-in; equals slot
            except for mindmap connections.
    """

    slot: int
    kind: EntryKind
    index: int
    element: Any
    reveal_index: int


@dataclass(frozen=True)
class FrameState:
    """Per-frame answer for the compositor."""

    frame: int
    opacities: Tuple[float, ...]
    visible_count: int
    total: int

    @property
    def progress_label(self) -> str:
        return f"{self.visible_count} / {self.total} elements"


_Item = Tuple[EntryKind, int, Any, Optional[int]]


def _flowchart_items(diagram: FlowchartDiagram) -> List[_Item]:
    items: List[_Item] = []
    for i in range(max(len(diagram.nodes), len(diagram.edges))):
        if i < len(diagram.nodes):
            items.append((EntryKind.NODE, i, diagram.nodes[i], None))
        if i < len(diagram.edges):
            items.append((EntryKind.EDGE, i, diagram.edges[i], None))
    return items


def _sequence_items(diagram: SequenceDiagram) -> List[_Item]:
    items: List[_Item] = [
        (EntryKind.ACTOR, i, actor, None) for i, actor in enumerate(diagram.actors)
    ]
    items.extend(
        (EntryKind.MESSAGE, i, msg, None) for i, msg in enumerate(diagram.messages)
    )
    return items


def _pie_items(diagram: PieChart) -> List[_Item]:
    items: List[_Item] = [(EntryKind.TITLE, 0, diagram.title, None)]
    items.extend(
        (EntryKind.SEGMENT, i, seg, None) for i, seg in enumerate(diagram.segments)
    )
    return items


def _state_items(diagram: StateDiagram) -> List[_Item]:
    items: List[_Item] = [
        (EntryKind.STATE, i, node, None) for i, node in enumerate(diagram.nodes)
    ]
    items.extend(
        (EntryKind.TRANSITION, i, t, None)
        for i, t in enumerate(diagram.transitions)
    )
    return items


def _mindmap_items(diagram: MindmapDiagram) -> List[_Item]:
    items: List[_Item] = [
        (EntryKind.NODE, i, node, None) for i, node in enumerate(diagram.nodes)
    ]
    slot_of = {node.id: i for i, node in enumerate(diagram.nodes)}
    for i, conn in enumerate(diagram.connections):
        if conn.source not in slot_of or conn.target not in slot_of:
            continue
        reveal = max(slot_of[conn.source], slot_of[conn.target])
        items.append((EntryKind.CONNECTION, i, conn, reveal))
    return items


def build_entries(diagram: ParsedDiagram) -> Tuple[SequenceEntry, ...]:
    """
    Assign every element of ``diagram`` a slot in the reveal order.

    Raises:
        TypeError: If ``diagram`` is not a ParsedDiagram variant.
    """
    if isinstance(diagram, FlowchartDiagram):
        items = _flowchart_items(diagram)
    elif isinstance(diagram, SequenceDiagram):
        items = _sequence_items(diagram)
    elif isinstance(diagram, PieChart):
        items = _pie_items(diagram)
    elif isinstance(diagram, StateDiagram):
        items = _state_items(diagram)
    elif isinstance(diagram, MindmapDiagram):
        items = _mindmap_items(diagram)
    elif isinstance(diagram, UnsupportedDiagram):
        items = []
    else:
        raise TypeError(f"Not a parsed diagram: {type(diagram).__name__}")

    return tuple(
        SequenceEntry(
            slot=slot,
            kind=kind,
            index=index,
            element=element,
            reveal_index=slot if reveal is None else reveal,
        )
        for slot, (kind, index, element, reveal) in enumerate(items)
    )


def reveal_opacity(reveal_index: int, frame: float, frames_per_element: int) -> float:
    """Linear fade-in from the element's start frame, clamped to [0, 1]."""
    start = reveal_index * frames_per_element
    if frame < start:
        return 0.0
    return min((frame - start) / (frames_per_element * FADE_FRACTION), 1.0)


class RevealSchedule:
    """
    Timed reveal of one parsed diagram.

    Pure with respect to frames: every query is computed from the entries
    and the frame number alone, so frames can be evaluated in any order.

    Example:
        >>> schedule = RevealSchedule.for_diagram(diagram, frames_per_element=20)
        >>> state = schedule.frame_state(45)
        >>> print(state.progress_label)
    """

    def __init__(
        self,
        entries: Tuple[SequenceEntry, ...],
        frames_per_element: int = DEFAULT_FRAMES_PER_ELEMENT,
    ):
        if frames_per_element <= 0:
            raise ValueError("frames_per_element must be positive")
        self.entries = tuple(entries)
        self.frames_per_element = frames_per_element

    @classmethod
    def for_diagram(
        cls,
        diagram: ParsedDiagram,
        frames_per_element: int = DEFAULT_FRAMES_PER_ELEMENT,
    ) -> "RevealSchedule":
        return cls(build_entries(diagram), frames_per_element)

    @property
    def total(self) -> int:
        return len(self.entries)

    def start_frame(self, entry: SequenceEntry) -> int:
        return entry.reveal_index * self.frames_per_element

    def opacity(self, entry: SequenceEntry, frame: float) -> float:
        return reveal_opacity(entry.reveal_index, frame, self.frames_per_element)

    def entry_for(self, kind: EntryKind, index: int) -> Optional[SequenceEntry]:
        for entry in self.entries:
            if entry.kind is kind and entry.index == index:
                return entry
        return None

    def entries_of(self, kind: EntryKind) -> List[SequenceEntry]:
        return [entry for entry in self.entries if entry.kind is kind]

    def visible_count(self, frame: float) -> int:
        return sum(1 for entry in self.entries if frame >= self.start_frame(entry))

    def frame_state(self, frame: int) -> FrameState:
        return FrameState(
            frame=frame,
            opacities=tuple(self.opacity(entry, frame) for entry in self.entries),
            visible_count=self.visible_count(frame),
            total=self.total,
        )

    def duration_in_frames(self, tail_frames: int = 0) -> int:
        """Frames needed to reveal everything, plus a trailing hold."""
        if tail_frames < 0:
            raise ValueError("tail_frames must not be negative")
        return self.total * self.frames_per_element + tail_frames


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class FadeTimeline:
    """
    Whole-diagram fade for a still (non-sequenced) rendering.

    The diagram fades and scales in over the first ``fade_in_frames`` and
    fades out over the last ``fade_out_frames``.
    """

    def __init__(
        self,
        duration_in_frames: int,
        fade_in_frames: int = 15,
        fade_out_frames: int = 30,
        start_scale: float = 0.8,
    ):
        if duration_in_frames <= 0:
            raise ValueError("duration_in_frames must be positive")
        if fade_in_frames <= 0 or fade_out_frames <= 0:
            raise ValueError("fade lengths must be positive")
        self.duration_in_frames = duration_in_frames
        self.fade_in_frames = fade_in_frames
        self.fade_out_frames = fade_out_frames
        self.start_scale = start_scale

    def opacity(self, frame: float) -> float:
        fade_in = _clamp(frame / self.fade_in_frames)
        fade_out = _clamp((self.duration_in_frames - frame) / self.fade_out_frames)
        return fade_in * fade_out

    def scale(self, frame: float) -> float:
        progress = _clamp(frame / self.fade_in_frames)
        return self.start_scale + (1.0 - self.start_scale) * progress
