"""Unit tests for pie chart parsing and layout."""

import math

import pytest

from mermaidreel.pie import (
    DEFAULT_TITLE,
    PALETTE,
    START_ANGLE,
    layout_pie,
    parse_title,
    parse_values,
    slice_circle,
)


class TestParsing:
    def test_inline_title(self):
        assert parse_title("pie title Pets adopted") == "Pets adopted"

    def test_standalone_title_line(self):
        assert parse_title('pie\n    title Budget\n    "A" : 1') == "Budget"

    def test_default_title(self):
        assert parse_title('pie\n "A" : 1') == DEFAULT_TITLE

    def test_values_in_order(self, pie_input):
        assert parse_values(pie_input) == [
            ("TypeScript", 40.0),
            ("Python", 25.0),
            ("Go", 15.0),
            ("Rust", 10.0),
            ("Other", 10.0),
        ]

    def test_decimal_values(self):
        assert parse_values('pie\n "A" : 1.5') == [("A", 1.5)]


class TestSliceCircle:
    """Tests for proportional partitioning."""

    def test_two_segments(self):
        chart = layout_pie('pie title Test\n "A" : 60\n "B" : 40')
        a, b = chart.segments
        assert chart.title == "Test"
        assert a.start_angle == pytest.approx(-math.pi / 2)
        assert a.sweep == pytest.approx(0.6 * 2 * math.pi)
        assert b.start_angle == pytest.approx(a.end_angle)
        assert b.end_angle == pytest.approx(-math.pi / 2 + 2 * math.pi)

    def test_sweeps_sum_to_full_circle(self, pie_input):
        segments = layout_pie(pie_input).segments
        assert sum(s.sweep for s in segments) == pytest.approx(2 * math.pi)
        assert segments[0].start_angle == pytest.approx(START_ANGLE)

    def test_contiguous(self, pie_input):
        segments = layout_pie(pie_input).segments
        for prev, seg in zip(segments, segments[1:]):
            assert seg.start_angle == pytest.approx(prev.end_angle)

    def test_zero_total(self):
        assert slice_circle([("A", 0.0), ("B", 0.0)]) == ()

    def test_no_values(self):
        chart = layout_pie("pie title Empty")
        assert chart.title == "Empty"
        assert chart.segments == ()

    def test_zero_valued_segment_kept(self):
        segments = slice_circle([("A", 1.0), ("B", 0.0)])
        assert segments[1].sweep == 0

    def test_palette_cycles(self):
        values = [(str(i), 1.0) for i in range(len(PALETTE) + 2)]
        segments = slice_circle(values)
        assert segments[0].color == PALETTE[0]
        assert segments[len(PALETTE)].color == PALETTE[0]
        assert segments[len(PALETTE) + 1].color == PALETTE[1]
