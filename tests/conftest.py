"""Pytest configuration and shared fixtures for mermaidreel tests."""

import pytest

from mermaidreel import AnimationGenerator
from mermaidreel.geometry import FlowchartGeometry, NodeGeometry
from mermaidreel.models import NodeShape
from mermaidreel.samples import (
    BRANCHING_FLOWCHART,
    MINDMAP,
    PIE_CHART,
    SEQUENCE_DIAGRAM,
    STATE_DIAGRAM,
)


@pytest.fixture
def simple_flowchart():
    """Two-node flowchart."""
    return "flowchart TD\n    A-->B"


@pytest.fixture
def simple_geometry():
    """Geometry for A above B."""
    return FlowchartGeometry.from_nodes(
        [
            NodeGeometry("A", "Start", 100, 50, 100, 40),
            NodeGeometry("B", "End", 100, 150, 100, 40, NodeShape.ROUNDED),
        ],
        view_width=200,
        view_height=200,
    )


@pytest.fixture
def branching_flowchart():
    return BRANCHING_FLOWCHART


@pytest.fixture
def branching_geometry():
    """Top-down geometry for the branching sample, one row per layer."""
    rows = {
        "A": (200, 40),
        "B": (200, 140),
        "C": (120, 240),
        "D": (320, 240),
        "E": (320, 340),
        "F": (120, 340),
        "G": (60, 540),
        "H": (200, 440),
        "I": (200, 490),
        "J": (60, 640),
    }
    return FlowchartGeometry.from_nodes(
        [
            NodeGeometry(
                node_id,
                "",
                x,
                y,
                120,
                50,
                NodeShape.DIAMOND if node_id in ("B", "F") else NodeShape.RECT,
            )
            for node_id, (x, y) in rows.items()
        ],
        view_width=420,
        view_height=700,
    )


@pytest.fixture
def sequence_input():
    return SEQUENCE_DIAGRAM


@pytest.fixture
def pie_input():
    return PIE_CHART


@pytest.fixture
def state_input():
    return STATE_DIAGRAM


@pytest.fixture
def mindmap_input():
    return MINDMAP


@pytest.fixture
def generator():
    """Default AnimationGenerator instance."""
    return AnimationGenerator(frames_per_element=20)
