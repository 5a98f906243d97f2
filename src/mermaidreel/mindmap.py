"""
Mindmap parsing and radial layout.

Indentation defines the tree: every INDENT_WIDTH spaces past the first
node line's indentation is one level deeper. Main branches (level 1) are
spread evenly around the root; deeper nodes fan out around their parent's
branch direction at a radius that grows with depth.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Tuple

from .models import MindmapConnection, MindmapDiagram, MindmapNode

logger = logging.getLogger(__name__)

INDENT_WIDTH = 4
CENTER_X = 400.0
CENTER_Y = 300.0
BRANCH_RADIUS = 160.0
LEVEL_RADIUS_STEP = 120.0
CHILD_SPREAD = math.pi / 6

ROOT_RE = re.compile(r"root\(\((.+)\)\)")
# id((circle)), id))bang((, id{{hexagon}}, id[square], id(rounded), id)cloud(
SHAPE_RE = re.compile(
    r"^\w*(?:\(\(|\)\)|\{\{|\[|\(|\))(.+?)(?:\)\)|\(\(|\}\}|\]|\)|\()$"
)
# Icons, classes and %% comments are not nodes
DECORATION_PREFIXES = ("::icon", ":::", "%%")


class MindmapLine(NamedTuple):
    level: int
    label: str


class _Ancestor(NamedTuple):
    id: str
    level: int
    branch_angle: float


@dataclass
class _LayoutState:
    """Accumulator threaded through the line fold."""

    branch_count: int
    nodes: List[MindmapNode] = field(default_factory=list)
    connections: List[MindmapConnection] = field(default_factory=list)
    stack: List[_Ancestor] = field(default_factory=list)
    child_counts: Dict[str, int] = field(default_factory=dict)
    branch_index: int = 0


def _indent(line: str) -> int:
    expanded = line.expandtabs(INDENT_WIDTH)
    return len(expanded) - len(expanded.lstrip())


def _label(text: str) -> str:
    match = ROOT_RE.search(text)
    if match:
        return match.group(1).strip()
    match = SHAPE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def parse_lines(diagram: str) -> List[MindmapLine]:
    """Read (level, label) pairs, skipping the header and decorations."""
    lines: List[MindmapLine] = []
    base: Optional[int] = None
    for raw in diagram.split("\n"):
        stripped = raw.strip()
        if not stripped or stripped.lower().startswith("mindmap"):
            continue
        if stripped.startswith(DECORATION_PREFIXES):
            continue
        indent = _indent(raw)
        if base is None:
            base = indent
        level = max(0, indent - base) // INDENT_WIDTH
        label = _label(stripped)
        if label:
            lines.append(MindmapLine(level, label))
    return lines


def _polar(angle: float, radius: float) -> Tuple[float, float]:
    return CENTER_X + radius * math.cos(angle), CENTER_Y + radius * math.sin(angle)


def _place(state: _LayoutState, line: MindmapLine) -> _LayoutState:
    node_id = f"node-{len(state.nodes)}"

    if line.level == 0:
        state.nodes.append(
            MindmapNode(node_id, line.label, 0, CENTER_X, CENTER_Y, is_root=True)
        )
        state.stack = [_Ancestor(node_id, 0, 0.0)]
        return state

    while state.stack and state.stack[-1].level >= line.level:
        state.stack.pop()
    parent = state.stack[-1] if state.stack else None

    x, y, angle = CENTER_X, CENTER_Y, 0.0
    if parent is not None:
        if line.level == 1:
            angle = (
                state.branch_index / state.branch_count * 2 * math.pi - math.pi / 2
            )
            x, y = _polar(angle, BRANCH_RADIUS)
            state.branch_index += 1
        else:
            child_index = state.child_counts.get(parent.id, 0)
            state.child_counts[parent.id] = child_index + 1
            angle = parent.branch_angle + (child_index - 1) * CHILD_SPREAD
            radius = BRANCH_RADIUS + (line.level - 1) * LEVEL_RADIUS_STEP
            x, y = _polar(angle, radius)
        state.connections.append(MindmapConnection(parent.id, node_id))

    state.nodes.append(
        MindmapNode(
            node_id,
            line.label,
            line.level,
            x,
            y,
            parent_id=parent.id if parent else None,
            branch_angle=angle,
        )
    )
    state.stack.append(_Ancestor(node_id, line.level, angle))
    return state


def layout_mindmap(diagram: str) -> MindmapDiagram:
    lines = parse_lines(diagram)
    state = _LayoutState(branch_count=sum(1 for ln in lines if ln.level == 1))
    for line in lines:
        state = _place(state, line)

    logger.debug("Mindmap nodes: %s", state.nodes)
    logger.debug("Mindmap connections: %s", state.connections)

    return MindmapDiagram(
        nodes=tuple(state.nodes), connections=tuple(state.connections)
    )
