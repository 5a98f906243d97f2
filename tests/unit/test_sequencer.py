"""Unit tests for the reveal schedule."""

import pytest

from mermaidreel.models import (
    Edge,
    FlowchartDiagram,
    MindmapConnection,
    MindmapDiagram,
    MindmapNode,
    Node,
    PieChart,
    PieSegment,
    Point,
    SequenceActor,
    SequenceDiagram,
    SequenceMessage,
    UnsupportedDiagram,
)
from mermaidreel.sequencer import (
    EntryKind,
    FadeTimeline,
    RevealSchedule,
    build_entries,
    reveal_opacity,
)


def _node(node_id, y=0.0):
    return Node(node_id, node_id, 0.0, y, 100.0, 40.0)


def _edge(source, target):
    return Edge(source, target, (Point(0, 0), Point(0, 1)))


@pytest.fixture
def two_actor_sequence():
    return SequenceDiagram(
        actors=(SequenceActor("A", "A", 120.0), SequenceActor("B", "B", 300.0)),
        messages=(SequenceMessage(0, 1, "hi", 100.0),),
        width=500.0,
        height=180.0,
    )


class TestBuildEntries:
    """Tests for slot assignment per dialect."""

    def test_flowchart_interleaves(self):
        diagram = FlowchartDiagram(
            nodes=(_node("A"), _node("B"), _node("C")),
            edges=(_edge("A", "B"),),
        )
        entries = build_entries(diagram)
        assert [(e.kind, e.index) for e in entries] == [
            (EntryKind.NODE, 0),
            (EntryKind.EDGE, 0),
            (EntryKind.NODE, 1),
            (EntryKind.NODE, 2),
        ]

    def test_flowchart_more_edges_than_nodes(self):
        diagram = FlowchartDiagram(
            nodes=(_node("A"),),
            edges=(_edge("A", "A"), _edge("A", "A")),
        )
        kinds = [e.kind for e in build_entries(diagram)]
        assert kinds == [EntryKind.NODE, EntryKind.EDGE, EntryKind.EDGE]

    def test_sequence_actors_then_messages(self, two_actor_sequence):
        entries = build_entries(two_actor_sequence)
        assert [e.kind for e in entries] == [
            EntryKind.ACTOR,
            EntryKind.ACTOR,
            EntryKind.MESSAGE,
        ]

    def test_pie_title_first(self):
        chart = PieChart(
            title="T",
            segments=(PieSegment("A", 1.0, "#000000", 0.0, 1.0),),
        )
        entries = build_entries(chart)
        assert entries[0].kind is EntryKind.TITLE
        assert entries[0].element == "T"
        assert entries[1].kind is EntryKind.SEGMENT

    def test_mindmap_connection_revealed_with_later_endpoint(self):
        diagram = MindmapDiagram(
            nodes=(
                MindmapNode("node-0", "R", 0, 0.0, 0.0, is_root=True),
                MindmapNode("node-1", "A", 1, 0.0, 0.0, parent_id="node-0"),
                MindmapNode("node-2", "B", 1, 0.0, 0.0, parent_id="node-0"),
            ),
            connections=(
                MindmapConnection("node-0", "node-1"),
                MindmapConnection("node-0", "node-2"),
            ),
        )
        entries = build_entries(diagram)
        connections = [e for e in entries if e.kind is EntryKind.CONNECTION]
        assert [e.slot for e in connections] == [3, 4]
        assert [e.reveal_index for e in connections] == [1, 2]

    def test_slots_gapless(self, two_actor_sequence):
        entries = build_entries(two_actor_sequence)
        assert [e.slot for e in entries] == list(range(len(entries)))

    def test_unsupported_has_no_entries(self):
        assert build_entries(UnsupportedDiagram()) == ()

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            build_entries("flowchart TD")


class TestRevealOpacity:
    def test_ramp(self):
        assert reveal_opacity(1, 19, 20) == 0.0
        assert reveal_opacity(1, 20, 20) == 0.0
        assert reveal_opacity(1, 25, 20) == pytest.approx(0.5)
        assert reveal_opacity(1, 30, 20) == 1.0
        assert reveal_opacity(1, 500, 20) == 1.0


class TestRevealSchedule:
    """Tests for per-frame queries."""

    def test_start_frames(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence, 20)
        assert [schedule.start_frame(e) for e in schedule.entries] == [0, 20, 40]

    def test_visible_count(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence, 20)
        assert schedule.visible_count(0) == 1
        assert schedule.visible_count(19) == 1
        assert schedule.visible_count(20) == 2
        assert schedule.visible_count(40) == 3
        assert schedule.visible_count(1000) == 3

    def test_frame_state(self, two_actor_sequence):
        state = RevealSchedule.for_diagram(two_actor_sequence, 20).frame_state(25)
        assert state.opacities == pytest.approx((1.0, 0.5, 0.0))
        assert state.progress_label == "2 / 3 elements"

    def test_opacity_monotonic(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence, 10)
        for entry in schedule.entries:
            values = [schedule.opacity(entry, f) for f in range(60)]
            assert values == sorted(values)
            assert all(0.0 <= v <= 1.0 for v in values)

    def test_frames_evaluated_in_any_order(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence, 20)
        later = schedule.frame_state(45)
        schedule.frame_state(3)
        assert schedule.frame_state(45) == later

    def test_entry_lookup(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence)
        assert schedule.entry_for(EntryKind.MESSAGE, 0).slot == 2
        assert schedule.entry_for(EntryKind.MESSAGE, 5) is None
        assert len(schedule.entries_of(EntryKind.ACTOR)) == 2

    def test_duration(self, two_actor_sequence):
        schedule = RevealSchedule.for_diagram(two_actor_sequence, 20)
        assert schedule.duration_in_frames() == 60
        assert schedule.duration_in_frames(tail_frames=30) == 90
        with pytest.raises(ValueError):
            schedule.duration_in_frames(tail_frames=-1)

    def test_rejects_non_positive_frames_per_element(self):
        with pytest.raises(ValueError):
            RevealSchedule((), frames_per_element=0)

    def test_empty_schedule(self):
        schedule = RevealSchedule.for_diagram(UnsupportedDiagram())
        assert schedule.total == 0
        assert schedule.frame_state(10).progress_label == "0 / 0 elements"


class TestFadeTimeline:
    """Tests for the whole-diagram fade."""

    def test_fade_in_and_out(self):
        timeline = FadeTimeline(100, fade_in_frames=10, fade_out_frames=20)
        assert timeline.opacity(0) == 0.0
        assert timeline.opacity(5) == pytest.approx(0.5)
        assert timeline.opacity(50) == 1.0
        assert timeline.opacity(90) == pytest.approx(0.5)
        assert timeline.opacity(100) == 0.0

    def test_scale(self):
        timeline = FadeTimeline(100, fade_in_frames=10, start_scale=0.8)
        assert timeline.scale(0) == pytest.approx(0.8)
        assert timeline.scale(5) == pytest.approx(0.9)
        assert timeline.scale(50) == pytest.approx(1.0)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            FadeTimeline(0)
        with pytest.raises(ValueError):
            FadeTimeline(100, fade_in_frames=0)
