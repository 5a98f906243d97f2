"""
Re-parsing diagrams as their text changes.

Flowchart parses await an external render, so a slow render for old text
can finish after a newer parse was requested. Each update carries a
SupersedeToken; starting a new update supersedes the previous token and a
superseded result is discarded instead of replacing the current one.
"""

import logging
from typing import Optional

from .geometry import GeometrySource
from .models import ParsedDiagram
from .parser import aparse_diagram

logger = logging.getLogger(__name__)


class SupersedeToken:
    """Marks one parse attempt; superseded once a newer attempt starts."""

    def __init__(self, generation: int):
        self.generation = generation
        self._superseded = False

    @property
    def superseded(self) -> bool:
        return self._superseded

    def supersede(self) -> None:
        self._superseded = True


class LayoutSession:
    """
    Keeps the layout for the most recently submitted diagram text.

    Example:
        >>> session = LayoutSession(MermaidCliGeometrySource())
        >>> diagram = await session.update(text)
        >>> session.current is diagram
        True
    """

    def __init__(self, source: GeometrySource):
        self.source = source
        self.current: Optional[ParsedDiagram] = None
        self.current_text: Optional[str] = None
        self._token: Optional[SupersedeToken] = None
        self._generation = 0

    def _issue_token(self) -> SupersedeToken:
        if self._token is not None:
            self._token.supersede()
        self._generation += 1
        self._token = SupersedeToken(self._generation)
        return self._token

    async def update(self, diagram: str) -> Optional[ParsedDiagram]:
        """
        Parse ``diagram`` and make it current unless superseded meanwhile.

        Returns:
            The parsed diagram, or None if a newer update started before
            this one finished.
        """
        token = self._issue_token()
        parsed = await aparse_diagram(diagram, self.source)

        if token.superseded:
            logger.debug("Discarding stale parse (generation %d)", token.generation)
            return None

        self.current = parsed
        self.current_text = diagram
        return parsed
