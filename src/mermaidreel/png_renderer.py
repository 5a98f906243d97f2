"""
PNG Renderer module for animated diagrams.

Renders single frames of an AnimatedDiagram as raster images, each element
drawn at the opacity its reveal schedule gives for that frame. Useful for
previews and for checking a layout without the video pipeline.
"""

import math
import os
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .generator import AnimatedDiagram
from .models import (
    Edge,
    FlowchartDiagram,
    LineStyle,
    MindmapConnection,
    MindmapDiagram,
    MindmapNode,
    Node,
    NodeShape,
    PieChart,
    PieSegment,
    SequenceActor,
    SequenceDiagram,
    SequenceMessage,
    StateDiagram,
    StateNode,
    StateTransition,
)
from .sequencer import EntryKind, FadeTimeline, SequenceEntry

PIE_CENTER = (400.0, 380.0)
PIE_RADIUS = 180.0
STATE_BOX = (120.0, 50.0)
ACTOR_BOX = (100.0, 40.0)
ARROW_SIZE = 8.0

# Kinds drawn before everything else so lines sit behind boxes
LINE_KINDS = (EntryKind.EDGE, EntryKind.TRANSITION, EntryKind.CONNECTION)

LEVEL_COLORS = ("#4e79a7", "#e15759", "#59a14f", "#f28e2b")

Color = Tuple[int, int, int]


def _rgb(hex_color: str) -> Color:
    value = hex_color.lstrip("#")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


class FrameRenderer:
    """Renders frames of animated diagrams as PIL images."""

    def __init__(
        self,
        scale: int = 1,
        background: str = "#1a1a2e",
        font_size: int = 14,
        font_path: Optional[str] = None,
        show_progress: bool = True,
    ):
        if scale <= 0:
            raise ValueError("scale must be positive")
        self.scale = scale
        self.font_size = font_size
        self.font_path = font_path
        self.show_progress = show_progress

        # Colors
        self.bg_color = _rgb(background)
        self.node_fill = _rgb("#2d2d44")
        self.node_outline = _rgb("#5a5a8a")
        self.line_color = _rgb("#888888")
        self.text_color = (255, 255, 255)
        self.label_color = _rgb("#cccccc")

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for rendering text."""
        if self.font is not None:
            return self.font

        font_size = self.font_size * self.scale

        # Use custom font if provided
        if self.font_path and os.path.exists(self.font_path):
            try:
                self.font = ImageFont.truetype(self.font_path, font_size)
                return self.font
            except OSError:
                pass  # Fall through to system fonts

        font_options = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        ]
        for path in font_options:
            if os.path.exists(path):
                try:
                    self.font = ImageFont.truetype(path, font_size)
                    return self.font
                except OSError:
                    continue

        # Fallback to default font
        self.font = ImageFont.load_default()
        return self.font

    def _canvas_size(self, animation: AnimatedDiagram) -> Tuple[float, float]:
        diagram = animation.diagram
        if isinstance(diagram, FlowchartDiagram):
            return diagram.view_width, diagram.view_height
        if isinstance(diagram, SequenceDiagram):
            return diagram.width, diagram.height + 100
        if isinstance(diagram, PieChart):
            return 800.0, 700.0
        if isinstance(diagram, StateDiagram):
            return 900.0, 600.0
        if isinstance(diagram, MindmapDiagram):
            return 900.0, 700.0
        return 800.0, 600.0

    # -- primitives ---------------------------------------------------------

    def _xy(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale, y * self.scale

    def _text(self, draw, x: float, y: float, text: str, fill: Color) -> None:
        """Draw text centered on (x, y) in diagram units."""
        font = self._get_font()
        bbox = draw.textbbox((0, 0), text, font=font)
        cx, cy = self._xy(x, y)
        w, h = bbox[2] - bbox[0], bbox[3] - bbox[1]
        draw.text((cx - w / 2, cy - h / 2), text, fill=fill, font=font)

    def _line(
        self,
        draw,
        points: Sequence[Tuple[float, float]],
        fill: Color,
        width: int = 2,
        dashed: bool = False,
    ) -> None:
        scaled = [self._xy(x, y) for x, y in points]
        if not dashed:
            draw.line(scaled, fill=fill, width=width * self.scale)
            return
        dash = 5 * self.scale
        for (x1, y1), (x2, y2) in zip(scaled, scaled[1:]):
            length = math.hypot(x2 - x1, y2 - y1)
            steps = int(length // dash)
            for i in range(0, steps, 2):
                t1 = i * dash / length
                t2 = min((i + 1) * dash / length, 1.0)
                draw.line(
                    [
                        (x1 + (x2 - x1) * t1, y1 + (y2 - y1) * t1),
                        (x1 + (x2 - x1) * t2, y1 + (y2 - y1) * t2),
                    ],
                    fill=fill,
                    width=width * self.scale,
                )

    def _arrowhead(
        self, draw, tip: Tuple[float, float], prev: Tuple[float, float], fill: Color
    ) -> None:
        angle = math.atan2(tip[1] - prev[1], tip[0] - prev[0])
        wing = math.pi / 6
        points = [
            tip,
            (
                tip[0] - ARROW_SIZE * math.cos(angle - wing),
                tip[1] - ARROW_SIZE * math.sin(angle - wing),
            ),
            (
                tip[0] - ARROW_SIZE * math.cos(angle + wing),
                tip[1] - ARROW_SIZE * math.sin(angle + wing),
            ),
        ]
        draw.polygon([self._xy(x, y) for x, y in points], fill=fill)

    def _box(
        self,
        draw,
        x: float,
        y: float,
        w: float,
        h: float,
        fill: Color,
        outline: Optional[Color] = None,
        radius: float = 0,
    ) -> None:
        box = [self._xy(x - w / 2, y - h / 2), self._xy(x + w / 2, y + h / 2)]
        if radius:
            draw.rounded_rectangle(
                box,
                radius=radius * self.scale,
                fill=fill,
                outline=outline,
                width=2 * self.scale,
            )
        else:
            draw.rectangle(box, fill=fill, outline=outline, width=2 * self.scale)

    def _circle(
        self,
        draw,
        x: float,
        y: float,
        r: float,
        fill: Optional[Color],
        outline: Optional[Color] = None,
    ) -> None:
        box = [self._xy(x - r, y - r), self._xy(x + r, y + r)]
        draw.ellipse(box, fill=fill, outline=outline, width=2 * self.scale)

    # -- elements -----------------------------------------------------------

    def _draw_flow_node(self, draw, node: Node) -> None:
        if node.shape is NodeShape.DIAMOND:
            points = [
                (node.x, node.y - node.height / 2),
                (node.x + node.width / 2, node.y),
                (node.x, node.y + node.height / 2),
                (node.x - node.width / 2, node.y),
            ]
            draw.polygon(
                [self._xy(x, y) for x, y in points],
                fill=self.node_fill,
                outline=self.node_outline,
            )
        elif node.shape is NodeShape.CIRCLE:
            self._circle(
                draw, node.x, node.y, node.width / 2, self.node_fill, self.node_outline
            )
        else:
            radius = 8 if node.shape is NodeShape.ROUNDED else 4
            self._box(
                draw,
                node.x,
                node.y,
                node.width,
                node.height,
                self.node_fill,
                self.node_outline,
                radius,
            )
        self._text(draw, node.x, node.y, node.label, self.text_color)

    def _draw_flow_edge(self, draw, edge: Edge) -> None:
        points = [(p.x, p.y) for p in edge.points]
        if len(points) < 2:
            return
        self._line(draw, points, self.line_color)
        self._arrowhead(draw, points[-1], points[-2], self.line_color)
        if edge.label:
            mid_x = (points[0][0] + points[-1][0]) / 2
            mid_y = (points[0][1] + points[-1][1]) / 2 - 5
            self._text(draw, mid_x, mid_y, edge.label, self.label_color)

    def _draw_actor(self, draw, actor: SequenceActor, height: float) -> None:
        w, h = ACTOR_BOX
        self._box(draw, actor.x, 20 + h / 2, w, h, self.node_fill, self.node_outline, 4)
        self._text(draw, actor.x, 20 + h / 2, actor.name, self.text_color)
        self._line(
            draw, [(actor.x, 20 + h), (actor.x, height)], self.node_outline, 1, True
        )

    def _draw_message(
        self, draw, msg: SequenceMessage, actors: Sequence[SequenceActor]
    ) -> None:
        if msg.source >= len(actors) or msg.target >= len(actors):
            return
        from_x, to_x = actors[msg.source].x, actors[msg.target].x
        self._line(
            draw,
            [(from_x, msg.y), (to_x, msg.y)],
            self.line_color,
            dashed=msg.style is LineStyle.DASHED,
        )
        direction = 1 if to_x >= from_x else -1
        self._arrowhead(draw, (to_x, msg.y), (to_x - direction, msg.y), self.line_color)
        self._text(draw, (from_x + to_x) / 2, msg.y - 8, msg.text, self.label_color)

    def _draw_segment(self, draw, seg: PieSegment) -> None:
        cx, cy = PIE_CENTER
        box = [
            self._xy(cx - PIE_RADIUS, cy - PIE_RADIUS),
            self._xy(cx + PIE_RADIUS, cy + PIE_RADIUS),
        ]
        # PIL measures degrees clockwise from 3 o'clock, matching y-down radians
        draw.pieslice(
            box,
            math.degrees(seg.start_angle),
            math.degrees(seg.end_angle),
            fill=_rgb(seg.color),
            outline=self.bg_color,
        )
        mid = (seg.start_angle + seg.end_angle) / 2
        label_x = cx + PIE_RADIUS * 1.3 * math.cos(mid)
        label_y = cy + PIE_RADIUS * 1.3 * math.sin(mid)
        self._text(draw, label_x, label_y, f"{seg.label} ({seg.value:g})", self.text_color)

    def _draw_state(self, draw, node: StateNode) -> None:
        if node.marker == "filled":
            self._circle(draw, node.x, node.y, 15, self.node_outline)
        elif node.marker == "double_ring":
            self._circle(draw, node.x, node.y, 18, None, self.node_outline)
            self._circle(draw, node.x, node.y, 10, self.node_outline)
        else:
            w, h = STATE_BOX
            self._box(
                draw, node.x, node.y, w, h, self.node_fill, self.node_outline, 10
            )
            self._text(draw, node.x, node.y, node.label, self.text_color)

    def _draw_transition(
        self, draw, trans: StateTransition, states: Dict[str, StateNode]
    ) -> None:
        source, target = states.get(trans.source), states.get(trans.target)
        if source is None or target is None:
            return
        dx, dy = target.x - source.x, target.y - source.y
        angle = math.atan2(dy, dx)
        start_gap = 15 if source.is_start else 60
        start = (source.x + start_gap * math.cos(angle), source.y + start_gap * math.sin(angle))
        end = (target.x - 60 * math.cos(angle), target.y - 60 * math.sin(angle))
        self._line(draw, [start, end], self.line_color)
        self._arrowhead(draw, end, start, self.line_color)
        if trans.label:
            mid_x = (start[0] + end[0]) / 2 - dy * 0.15
            mid_y = (start[1] + end[1]) / 2 + dx * 0.15
            self._text(draw, mid_x, mid_y, trans.label, self.text_color)

    def _draw_mindmap_node(self, draw, node: MindmapNode) -> None:
        color = _rgb(LEVEL_COLORS[node.level % len(LEVEL_COLORS)])
        if node.is_root:
            self._circle(draw, node.x, node.y, 70, color)
        else:
            main = node.level == 1
            width = max(len(node.label) * (14 if main else 12) + 30, 120 if main else 80)
            height = 45 if main else 35
            self._box(draw, node.x, node.y, width, height, color, None, 10)
        self._text(draw, node.x, node.y, node.label, self.text_color)

    def _draw_connection(
        self, draw, conn: MindmapConnection, nodes: Dict[str, MindmapNode]
    ) -> None:
        source, target = nodes.get(conn.source), nodes.get(conn.target)
        if source is None or target is None:
            return
        self._line(
            draw, [(source.x, source.y), (target.x, target.y)], _rgb("#6a6a9a"), 3
        )

    def _draw_entry(self, draw, animation: AnimatedDiagram, entry: SequenceEntry) -> None:
        diagram = animation.diagram
        element = entry.element
        if entry.kind is EntryKind.NODE and isinstance(element, Node):
            self._draw_flow_node(draw, element)
        elif entry.kind is EntryKind.NODE and isinstance(element, MindmapNode):
            self._draw_mindmap_node(draw, element)
        elif entry.kind is EntryKind.EDGE:
            self._draw_flow_edge(draw, element)
        elif entry.kind is EntryKind.ACTOR:
            self._draw_actor(draw, element, diagram.height)
        elif entry.kind is EntryKind.MESSAGE:
            self._draw_message(draw, element, diagram.actors)
        elif entry.kind is EntryKind.TITLE:
            self._text(draw, PIE_CENTER[0], 60, element, self.text_color)
        elif entry.kind is EntryKind.SEGMENT:
            self._draw_segment(draw, element)
        elif entry.kind is EntryKind.STATE:
            self._draw_state(draw, element)
        elif entry.kind is EntryKind.TRANSITION:
            self._draw_transition(draw, element, {n.id: n for n in diagram.nodes})
        elif entry.kind is EntryKind.CONNECTION:
            self._draw_connection(draw, element, {n.id: n for n in diagram.nodes})

    # -- frames -------------------------------------------------------------

    def render(self, animation: AnimatedDiagram, frame: int) -> Image.Image:
        """
        Render one frame with every element at its scheduled opacity.

        Args:
            animation: Diagram and reveal schedule.
            frame: Frame number (0-based).

        Returns:
            RGB image sized to the diagram's viewport times the scale.
        """
        width, height = self._canvas_size(animation)
        size = (max(1, int(width * self.scale)), max(1, int(height * self.scale)))
        image = Image.new("RGBA", size, self.bg_color + (255,))

        schedule = animation.schedule
        ordered: List[SequenceEntry] = sorted(
            schedule.entries, key=lambda e: e.kind not in LINE_KINDS
        )
        for entry in ordered:
            opacity = schedule.opacity(entry, frame)
            if opacity <= 0:
                continue
            layer = Image.new("RGBA", size, (0, 0, 0, 0))
            self._draw_entry(ImageDraw.Draw(layer), animation, entry)
            if opacity < 1:
                alpha = layer.getchannel("A").point(lambda a: int(a * opacity))
                layer.putalpha(alpha)
            image.alpha_composite(layer)

        draw = ImageDraw.Draw(image)
        if not animation.supported:
            self._text(
                draw,
                width / 2,
                height / 2,
                f"Unsupported diagram type: {animation.dialect.value}",
                self.line_color,
            )
        elif self.show_progress:
            state = schedule.frame_state(frame)
            self._text(draw, width / 2, height - 40, state.progress_label, self.line_color)

        return image.convert("RGB")

    def render_still(
        self, animation: AnimatedDiagram, frame: int, timeline: FadeTimeline
    ) -> Image.Image:
        """
        Render the fully revealed diagram faded and scaled by ``timeline``.
        """
        last_frame = animation.schedule.duration_in_frames()
        full = self.render(animation, last_frame)
        background = Image.new("RGB", full.size, self.bg_color)

        scale = timeline.scale(frame)
        scaled_size = (
            max(1, int(full.width * scale)),
            max(1, int(full.height * scale)),
        )
        scaled = full.resize(scaled_size)
        placed = background.copy()
        placed.paste(
            scaled,
            ((full.width - scaled.width) // 2, (full.height - scaled.height) // 2),
        )
        return Image.blend(background, placed, timeline.opacity(frame))

    def save(self, animation: AnimatedDiagram, frame: int, output_path: str) -> str:
        """Render one frame and save it as PNG; returns the path."""
        self.render(animation, frame).save(output_path, "PNG")
        return output_path
