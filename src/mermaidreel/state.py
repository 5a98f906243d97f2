"""
State diagram parsing and layered layout.

States are leveled breadth-first from the start marker and laid out left to
right, one column per level, with each column centered on a shared baseline.
"""

import logging
import re
from typing import Dict, Iterator, List, Optional

from .layout import assign_levels, build_graph, group_by_level
from .models import (
    STATE_END_ID,
    STATE_START_ID,
    StateDiagram,
    StateNode,
    StateTransition,
)

logger = logging.getLogger(__name__)

START_X = 100.0
LEVEL_SPACING = 180.0
CENTER_Y = 300.0
SIBLING_SPACING = 120.0

START_RE = re.compile(r"\[\*\]\s*-->\s*(\w+)")
END_RE = re.compile(r"(\w+)\s*-->\s*\[\*\]$")
TRANSITION_RE = re.compile(r"(\w+)\s*-->\s*(\w+)(?:\s*:\s*(.+))?")


def classify_line(line: str) -> Optional[StateTransition]:
    """Recognize a start, end or ordinary transition; None otherwise."""
    stripped = line.strip()

    match = START_RE.search(stripped)
    if match:
        return StateTransition(STATE_START_ID, match.group(1))

    match = END_RE.search(stripped)
    if match:
        return StateTransition(match.group(1), STATE_END_ID)

    match = TRANSITION_RE.search(stripped)
    if match:
        label = match.group(3).strip() if match.group(3) else None
        return StateTransition(match.group(1), match.group(2), label or None)

    return None


def iter_transitions(diagram: str) -> Iterator[StateTransition]:
    for line in diagram.split("\n"):
        transition = classify_line(line)
        if transition is not None:
            yield transition


def layout_state(diagram: str) -> StateDiagram:
    """
    Parse transitions and place every state on its level's column.

    Within a level, states are spread evenly and symmetrically around the
    baseline in the order they were leveled.
    """
    transitions = list(iter_transitions(diagram))

    # States in order of first appearance
    states: Dict[str, None] = {}
    for t in transitions:
        states.setdefault(t.source)
        states.setdefault(t.target)

    graph = build_graph(states, ((t.source, t.target) for t in transitions))
    extra_roots = [STATE_START_ID] if STATE_START_ID in states else []
    levels = assign_levels(graph, extra_roots=extra_roots)
    groups = group_by_level(levels)

    nodes: List[StateNode] = []
    for state in states:
        level = levels[state]
        group = groups[level]
        offset = group.index(state) - (len(group) - 1) / 2
        nodes.append(
            StateNode(
                id=state,
                label="" if state.startswith("[*]") else state,
                x=START_X + level * LEVEL_SPACING,
                y=CENTER_Y + offset * SIBLING_SPACING,
                level=level,
                is_start=state == STATE_START_ID,
                is_end=state == STATE_END_ID,
            )
        )

    logger.debug("State nodes: %s", nodes)
    logger.debug("State transitions: %s", transitions)

    return StateDiagram(nodes=tuple(nodes), transitions=tuple(transitions))
