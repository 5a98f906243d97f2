"""
Pie chart parsing and layout.
"""

import logging
import math
import re
from typing import List, Tuple

from .models import PieChart, PieSegment

logger = logging.getLogger(__name__)

# Tableau 10
PALETTE: Tuple[str, ...] = (
    "#4e79a7",
    "#f28e2b",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc948",
    "#b07aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ac",
)

DEFAULT_TITLE = "Pie Chart"

# 12 o'clock with y pointing down
START_ANGLE = -math.pi / 2

TITLE_RE = re.compile(r"^\s*(?:pie\s+)?title\s+(.+)", re.IGNORECASE)
SEGMENT_RE = re.compile(r'"([^"]+)"\s*:\s*(\d+(?:\.\d+)?)')


def parse_title(diagram: str) -> str:
    for line in diagram.split("\n"):
        match = TITLE_RE.match(line)
        if match:
            return match.group(1).strip()
    return DEFAULT_TITLE


def parse_values(diagram: str) -> List[Tuple[str, float]]:
    """Return (label, value) pairs in declaration order."""
    values = []
    for line in diagram.split("\n"):
        match = SEGMENT_RE.search(line)
        if match:
            values.append((match.group(1), float(match.group(2))))
    return values


def slice_circle(values: List[Tuple[str, float]]) -> Tuple[PieSegment, ...]:
    """
    Partition the full circle proportionally to the values.

    Segments start at 12 o'clock and proceed clockwise in the given order.
    A zero total produces no segments.
    """
    total = sum(value for _, value in values)
    if total <= 0:
        return ()

    segments = []
    angle = START_ANGLE
    for i, (label, value) in enumerate(values):
        sweep = value / total * 2 * math.pi
        segments.append(
            PieSegment(
                label=label,
                value=value,
                color=PALETTE[i % len(PALETTE)],
                start_angle=angle,
                end_angle=angle + sweep,
            )
        )
        angle += sweep
    return tuple(segments)


def layout_pie(diagram: str) -> PieChart:
    segments = slice_circle(parse_values(diagram))
    logger.debug("Pie segments: %s", segments)
    return PieChart(title=parse_title(diagram), segments=segments)
