"""
Flowchart geometry from a pre-rendered Mermaid SVG.

Mermaid computes concrete box coordinates for flowcharts; this module reads
them back out of the rendered SVG so the flowchart layout can reuse them.

Mermaid writes node groups like::

    <g class="node default" id="flowchart-A-0" transform="translate(75, 35)">
        <rect rx="5" width="130" height="54" .../>
        ... <span class="nodeLabel">Label</span> ...
    </g>

The renderer namespaces ids ("flowchart-") and appends a disambiguating
counter ("-0"); ``clean_node_id`` strips both to recover the author's id.

Rendering itself is delegated to a ``GeometrySource``. The Mermaid CLI
(``mmdc``) is resolved from the constructor argument, the ``MMDC_PATH``
environment variable, then the system PATH.
"""

import asyncio
import logging
import os
import re
import shutil
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol, Sequence

from .models import NodeShape

logger = logging.getLogger(__name__)

DEFAULT_NODE_WIDTH = 100.0
DEFAULT_NODE_HEIGHT = 40.0
DEFAULT_VIEW_WIDTH = 800.0
DEFAULT_VIEW_HEIGHT = 600.0

NAMESPACE_PREFIX_RE = re.compile(r"^flowchart-")
COUNTER_SUFFIX_RE = re.compile(r"-\d+$")
TRANSLATE_RE = re.compile(r"translate\(([^,)]+)[,\s]\s*([^)]+)\)")


class GeometryError(Exception):
    """Raised when flowchart geometry cannot be obtained."""

    pass


@dataclass(frozen=True)
class NodeGeometry:
    """Rendered position and size of a single flowchart node."""

    id: str
    label: str
    x: float
    y: float
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT
    shape: NodeShape = NodeShape.RECT


@dataclass
class FlowchartGeometry:
    """
    Geometry for a whole flowchart.

    Attributes:
        nodes: Node geometry keyed by cleaned id, in document order.
        view_width: Width of the rendered viewport.
        view_height: Height of the rendered viewport.
    """

    nodes: Dict[str, NodeGeometry] = field(default_factory=dict)
    view_width: float = DEFAULT_VIEW_WIDTH
    view_height: float = DEFAULT_VIEW_HEIGHT

    @classmethod
    def from_nodes(
        cls,
        nodes: Iterable[NodeGeometry],
        view_width: float = DEFAULT_VIEW_WIDTH,
        view_height: float = DEFAULT_VIEW_HEIGHT,
    ) -> "FlowchartGeometry":
        return cls({node.id: node for node in nodes}, view_width, view_height)


def clean_node_id(raw_id: str) -> str:
    """Strip Mermaid's namespace prefix and counter suffix from a node id."""
    return COUNTER_SUFFIX_RE.sub("", NAMESPACE_PREFIX_RE.sub("", raw_id))


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _classes(el: ET.Element) -> Sequence[str]:
    return (el.get("class") or "").split()


def _parse_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _find_descendant(el: ET.Element, tag: str) -> Optional[ET.Element]:
    for child in el.iter():
        if child is not el and _strip_ns(child.tag) == tag:
            return child
    return None


def _node_label(el: ET.Element) -> str:
    for child in el.iter():
        if "nodeLabel" in _classes(child):
            return "".join(t for t in child.itertext() if t).strip()
    return ""


def _polygon_size(points: str) -> Optional[tuple]:
    coords = []
    for pair in points.split():
        parts = pair.split(",")
        if len(parts) != 2:
            continue
        try:
            coords.append((float(parts[0]), float(parts[1])))
        except ValueError:
            continue
    if len(coords) < 4:
        return None
    xs = [c[0] for c in coords]
    ys = [c[1] for c in coords]
    return max(xs) - min(xs), max(ys) - min(ys)


def _node_shape(el: ET.Element) -> tuple:
    """Infer (width, height, shape) from the first shape element in a node."""
    rect = _find_descendant(el, "rect")
    if rect is not None:
        width = _parse_float(rect.get("width"), DEFAULT_NODE_WIDTH)
        height = _parse_float(rect.get("height"), DEFAULT_NODE_HEIGHT)
        shape = NodeShape.ROUNDED if rect.get("rx") else NodeShape.RECT
        return width, height, shape

    polygon = _find_descendant(el, "polygon")
    if polygon is not None:
        size = _polygon_size(polygon.get("points") or "")
        if size is None:
            return DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT, NodeShape.DIAMOND
        return size[0], size[1], NodeShape.DIAMOND

    circle = _find_descendant(el, "circle")
    if circle is not None:
        diameter = 2 * _parse_float(circle.get("r"), DEFAULT_NODE_HEIGHT / 2)
        return diameter, diameter, NodeShape.CIRCLE

    return DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT, NodeShape.RECT


def _view_box(svg: ET.Element) -> tuple:
    values = re.split(r"[\s,]+", (svg.get("viewBox") or "").strip())
    if len(values) != 4:
        return DEFAULT_VIEW_WIDTH, DEFAULT_VIEW_HEIGHT
    try:
        return float(values[2]), float(values[3])
    except ValueError:
        return DEFAULT_VIEW_WIDTH, DEFAULT_VIEW_HEIGHT


def parse_flowchart_svg(svg_text: str) -> FlowchartGeometry:
    """
    Extract node geometry from a Mermaid flowchart SVG.

    Args:
        svg_text: SVG document produced by Mermaid.

    Returns:
        FlowchartGeometry keyed by cleaned node id.

    Raises:
        GeometryError: If the SVG is not well-formed XML.
    """
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as exc:
        raise GeometryError(f"Invalid SVG: {exc}") from exc

    svg = root if _strip_ns(root.tag) == "svg" else _find_descendant(root, "svg")
    if svg is None:
        raise GeometryError("No <svg> element found")

    view_width, view_height = _view_box(svg)
    nodes: Dict[str, NodeGeometry] = {}

    for el in svg.iter():
        if _strip_ns(el.tag) != "g" or "node" not in _classes(el):
            continue
        match = TRANSLATE_RE.search(el.get("transform") or "")
        if not match:
            continue
        try:
            x = float(match.group(1))
            y = float(match.group(2))
        except ValueError:
            continue

        node_id = clean_node_id(el.get("id") or "")
        width, height, shape = _node_shape(el)
        nodes[node_id] = NodeGeometry(
            id=node_id,
            label=_node_label(el),
            x=x,
            y=y,
            width=width,
            height=height,
            shape=shape,
        )

    logger.debug("SVG geometry nodes: %s", list(nodes))
    return FlowchartGeometry(nodes, view_width, view_height)


class GeometrySource(Protocol):
    """Anything that can render diagram text into flowchart geometry."""

    async def fetch(self, diagram: str) -> FlowchartGeometry: ...


class StaticGeometrySource:
    """Returns geometry that was computed ahead of time."""

    def __init__(self, geometry: FlowchartGeometry):
        self.geometry = geometry

    async def fetch(self, diagram: str) -> FlowchartGeometry:
        return self.geometry


class SvgGeometrySource:
    """Reads geometry from an SVG already rendered from the same text."""

    def __init__(self, svg_text: str):
        self.svg_text = svg_text

    async def fetch(self, diagram: str) -> FlowchartGeometry:
        return parse_flowchart_svg(self.svg_text)


def find_mmdc() -> Optional[str]:
    """
    Find the Mermaid CLI (mmdc) executable.

    Search order:
        1. MMDC_PATH environment variable
        2. mmdc on system PATH

    Returns:
        Path to mmdc executable if found, None otherwise.
    """
    env_path = os.environ.get("MMDC_PATH")
    if env_path and os.path.isfile(env_path):
        return env_path
    return shutil.which("mmdc")


class MermaidCliGeometrySource:
    """
    Renders diagram text with the Mermaid CLI and reads back its geometry.

    Each fetch runs ``mmdc`` once as a subprocess inside a temporary
    directory. Any failure surfaces as a GeometryError.
    """

    def __init__(
        self,
        mmdc_path: Optional[str] = None,
        timeout: float = 60.0,
        extra_args: Sequence[str] = (),
    ):
        """
        Args:
            mmdc_path: Explicit path to the mmdc executable.
            timeout: Seconds to wait for a render before giving up.
            extra_args: Additional mmdc arguments (e.g. ("-t", "dark")).
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.mmdc_path = mmdc_path
        self.timeout = timeout
        self.extra_args = tuple(extra_args)

    async def fetch(self, diagram: str) -> FlowchartGeometry:
        mmdc = self.mmdc_path or find_mmdc()
        if mmdc is None:
            raise GeometryError("Mermaid CLI (mmdc) not found")

        with tempfile.TemporaryDirectory() as tmp_dir:
            workdir = Path(tmp_dir)
            input_path = workdir / "input.mmd"
            output_path = workdir / "output.svg"
            try:
                input_path.write_text(diagram, encoding="utf-8")
            except OSError as exc:
                raise GeometryError(f"Could not write mmdc input: {exc}") from exc

            try:
                process = await asyncio.create_subprocess_exec(
                    mmdc,
                    "-i",
                    str(input_path),
                    "-o",
                    str(output_path),
                    *self.extra_args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise GeometryError(f"Could not start mmdc: {exc}") from exc

            try:
                _, stderr = await asyncio.wait_for(
                    process.communicate(), timeout=self.timeout
                )
            except asyncio.TimeoutError as exc:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass  # Already exited
                await process.wait()
                raise GeometryError(
                    f"mmdc timed out after {self.timeout}s"
                ) from exc

            if process.returncode != 0:
                message = stderr.decode("utf-8", errors="replace").strip()
                raise GeometryError(
                    f"mmdc exited with status {process.returncode}: {message}"
                )
            if not output_path.exists():
                raise GeometryError("mmdc produced no output")

            try:
                svg_text = output_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise GeometryError(f"Could not read mmdc output: {exc}") from exc

        return parse_flowchart_svg(svg_text)
