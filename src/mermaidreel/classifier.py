"""
Dialect classification for diagram text.
"""

from typing import Tuple

from .models import DiagramDialect

# Checked in order; the first matching prefix wins.
DIALECT_PREFIXES: Tuple[Tuple[str, DiagramDialect], ...] = (
    ("flowchart", DiagramDialect.FLOWCHART),
    ("graph", DiagramDialect.FLOWCHART),
    ("sequencediagram", DiagramDialect.SEQUENCE),
    ("pie", DiagramDialect.PIE),
    ("statediagram", DiagramDialect.STATE),
    ("mindmap", DiagramDialect.MINDMAP),
)


def classify_dialect(diagram: str) -> DiagramDialect:
    """
    Determine which diagram dialect the text is written in.

    Args:
        diagram: Raw diagram text.

    Returns:
        The matching DiagramDialect, or DiagramDialect.UNKNOWN.
    """
    normalized = strip_preamble(diagram).strip().lower()
    for prefix, dialect in DIALECT_PREFIXES:
        if normalized.startswith(prefix):
            return dialect
    return DiagramDialect.UNKNOWN


def strip_preamble(diagram: str) -> str:
    """
    Drop leading blank lines, a ``---`` frontmatter block and ``%%``
    comment/directive lines, returning the text from the declaration on.
    """
    lines = diagram.split("\n")
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1

    # ---\ntitle: x\n---
    if start < len(lines) and lines[start].strip() == "---":
        for end in range(start + 1, len(lines)):
            if lines[end].strip() == "---":
                start = end + 1
                break

    while start < len(lines) and (
        not lines[start].strip() or lines[start].strip().startswith("%%")
    ):
        start += 1
    return "\n".join(lines[start:])
