"""
Parser module for diagram text.

Classifies the dialect once and dispatches to the matching parser/layout.
Malformed lines are skipped by the individual parsers, so parsing never
fails on diagram content; ``ParseError`` is reserved for input files that
contain no diagram at all.
"""

import logging
import re
from typing import Optional

from .classifier import classify_dialect, strip_preamble
from .flowchart import layout_flowchart
from .geometry import FlowchartGeometry, GeometryError, GeometrySource
from .mindmap import layout_mindmap
from .models import DiagramDialect, ParsedDiagram, UnsupportedDiagram
from .pie import layout_pie
from .sequence import layout_sequence
from .state import layout_state

logger = logging.getLogger(__name__)

MERMAID_BLOCK_RE = re.compile(r"```mermaid\s*\n(.*?)\n\s*```", re.DOTALL)


class ParseError(Exception):
    """Raised when input text contains no diagram to parse."""

    pass


_TEXT_LAYOUTS = {
    DiagramDialect.SEQUENCE: layout_sequence,
    DiagramDialect.PIE: layout_pie,
    DiagramDialect.STATE: layout_state,
    DiagramDialect.MINDMAP: layout_mindmap,
}


def parse_diagram(
    diagram: str, geometry: Optional[FlowchartGeometry] = None
) -> ParsedDiagram:
    """
    Parse diagram text into its dialect's laid-out structure.

    Args:
        diagram: Raw diagram text.
        geometry: Rendered node geometry; only used for flowcharts, which
            come out empty without it.

    Returns:
        One of the ParsedDiagram variants; UnsupportedDiagram when the
        dialect is not recognized.
    """
    dialect = classify_dialect(diagram)
    body = strip_preamble(diagram)
    if dialect is DiagramDialect.FLOWCHART:
        return layout_flowchart(body, geometry)
    if dialect in _TEXT_LAYOUTS:
        return _TEXT_LAYOUTS[dialect](body)

    logger.info("Unsupported diagram type: %s", dialect.value)
    return UnsupportedDiagram()


async def aparse_diagram(diagram: str, source: GeometrySource) -> ParsedDiagram:
    """
    Parse diagram text, rendering flowchart geometry through ``source``.

    The geometry source is awaited once, and only for flowcharts. A render
    failure is logged and yields an empty flowchart instead of raising.
    """
    if classify_dialect(diagram) is not DiagramDialect.FLOWCHART:
        return parse_diagram(diagram)

    try:
        geometry = await source.fetch(diagram)
    except GeometryError as exc:
        logger.warning("Flowchart render failed: %s", exc)
        geometry = None
    except Exception as exc:
        # Third-party sources; cancellation is a BaseException and propagates
        logger.warning(
            "Flowchart render failed (%s): %s", type(exc).__name__, exc
        )
        geometry = None
    return layout_flowchart(strip_preamble(diagram), geometry)


def extract_mermaid_block(markdown: str) -> str:
    """
    Return the first fenced ```mermaid block of a markdown document.

    Raises:
        ParseError: If the document has no mermaid block.
    """
    match = MERMAID_BLOCK_RE.search(markdown)
    if not match:
        raise ParseError("No mermaid code block found in markdown")
    return match.group(1)
