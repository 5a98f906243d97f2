"""Unit tests for superseding stale parses."""

import asyncio

from mermaidreel.geometry import FlowchartGeometry, NodeGeometry
from mermaidreel.models import FlowchartDiagram, PieChart
from mermaidreel.session import LayoutSession, SupersedeToken

OLD_TEXT = "flowchart TD\n A --> B"
NEW_TEXT = "flowchart TD\n B --> A"


class GatedSource:
    """Blocks the first fetch until ``gate`` is set."""

    def __init__(self, gate):
        self.gate = gate
        self.calls = 0
        self.geometry = FlowchartGeometry.from_nodes(
            [NodeGeometry("A", "A", 0, 0), NodeGeometry("B", "B", 0, 100)]
        )

    async def fetch(self, diagram):
        self.calls += 1
        if self.calls == 1:
            await self.gate.wait()
        return self.geometry


class TestSupersedeToken:
    def test_supersede(self):
        token = SupersedeToken(1)
        assert not token.superseded
        token.supersede()
        assert token.superseded


class TestLayoutSession:
    """Tests for LayoutSession.update."""

    def test_update_sets_current(self):
        async def run():
            session = LayoutSession(GatedSource(asyncio.Event()))
            session.source.calls = 1  # skip the gate
            diagram = await session.update(OLD_TEXT)
            return session, diagram

        session, diagram = asyncio.run(run())
        assert isinstance(diagram, FlowchartDiagram)
        assert session.current is diagram
        assert session.current_text == OLD_TEXT

    def test_stale_result_discarded(self):
        """A slow render finishing after a newer update is dropped."""

        async def run():
            gate = asyncio.Event()
            session = LayoutSession(GatedSource(gate))
            old = asyncio.create_task(session.update(OLD_TEXT))
            await asyncio.sleep(0)
            new = await session.update(NEW_TEXT)
            gate.set()
            stale = await old
            return session, stale, new

        session, stale, new = asyncio.run(run())
        assert stale is None
        assert session.current is new
        assert session.current_text == NEW_TEXT
        assert [(e.source, e.target) for e in new.edges] == [("B", "A")]

    def test_render_crash_keeps_session_usable(self):
        class CrashingSource:
            async def fetch(self, diagram):
                raise RuntimeError("renderer crashed")

        async def run():
            session = LayoutSession(CrashingSource())
            diagram = await session.update(OLD_TEXT)
            return session, diagram

        session, diagram = asyncio.run(run())
        assert diagram == FlowchartDiagram()
        assert session.current is diagram

    def test_text_dialects_do_not_render(self, pie_input):
        async def run():
            session = LayoutSession(GatedSource(asyncio.Event()))
            diagram = await session.update(pie_input)
            return session, diagram

        session, diagram = asyncio.run(run())
        assert isinstance(diagram, PieChart)
        assert session.source.calls == 0
