"""
File import/export for animated diagrams.

This module handles reading diagram sources and writing results:
- Diagram sources (.mmd files, or markdown with a ```mermaid block)
- JSON layouts - every element with its coordinates and reveal slot
- PNG frames - single frames or whole frame sequences for previewing

The DiagramExporter class holds the renderer used for PNG output.
"""

import dataclasses
import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .generator import AnimatedDiagram
from .parser import extract_mermaid_block
from .png_renderer import FrameRenderer


def read_diagram_file(filename: str) -> str:
    """
    Read diagram text from a file.

    Markdown files (.md) must contain a fenced ```mermaid block, whose
    body is returned. Any other file is returned verbatim.

    Raises:
        ParseError: If a markdown file has no mermaid block.
        OSError: If the file cannot be read.
    """
    path = Path(filename)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".md":
        return extract_mermaid_block(text)
    return text


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


class DiagramExporter:
    """
    Exports animated diagrams to JSON and PNG.

    Attributes:
        renderer: FrameRenderer used for PNG output.
    """

    def __init__(self, renderer: Optional[FrameRenderer] = None):
        self.renderer = renderer or FrameRenderer()

    def to_dict(self, animation: AnimatedDiagram) -> Dict[str, Any]:
        """
        Convert a diagram and its schedule to JSON-compatible data.

        The result has the dialect, the diagram's fields, and the reveal
        order as a list of {slot, kind, index, start_frame}.
        """
        schedule = animation.schedule
        return {
            "dialect": animation.dialect.value,
            "diagram": _plain(dataclasses.asdict(animation.diagram)),
            "frames_per_element": schedule.frames_per_element,
            "sequence": [
                {
                    "slot": entry.slot,
                    "kind": entry.kind.value,
                    "index": entry.index,
                    "start_frame": schedule.start_frame(entry),
                }
                for entry in schedule.entries
            ],
        }

    def save_json(self, animation: AnimatedDiagram, filename: str) -> None:
        output_path = Path(filename)
        output_path.write_text(
            json.dumps(self.to_dict(animation), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def save_frame_png(
        self, animation: AnimatedDiagram, frame: int, filename: str
    ) -> str:
        """Render one frame to a PNG file and return its path."""
        return self.renderer.save(animation, frame, filename)

    def save_frames(
        self,
        animation: AnimatedDiagram,
        directory: str,
        frames: Optional[Iterable[int]] = None,
        prefix: str = "frame",
    ) -> List[str]:
        """
        Render a sequence of frames into ``directory``.

        Args:
            animation: Diagram and schedule to render.
            directory: Output directory (created if missing).
            frames: Frame numbers to render; defaults to every frame of the
                schedule's duration.
            prefix: File name prefix; files are named <prefix>_<frame>.png.

        Returns:
            Paths of the written files, in frame order.
        """
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        if frames is None:
            frames = range(animation.schedule.duration_in_frames())

        paths = []
        for frame in frames:
            path = out_dir / f"{prefix}_{frame:05d}.png"
            paths.append(self.save_frame_png(animation, frame, str(path)))
        return paths
