"""
Debug tracing infrastructure for mermaidreel.

This module provides data structures for capturing a trace of the
diagram-to-animation pipeline. When debug mode is enabled, the generator
records each stage with the intermediate data it produced.

Usage:
    >>> generator = AnimationGenerator()
    >>> animation = generator.generate(PIE_CHART, debug=True)
    >>> trace = generator.get_trace()
    >>> print(trace.summary())
    >>> trace.dump_to_file("debug_trace.txt")

The trace captures:
- classify: the detected dialect
- parse: element lists of the parsed diagram
- schedule: the reveal order and timing
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class RenderTrace:
    """
    Complete trace of one generate() call.

    Attributes:
        stages: List of pipeline stages with their data
        input_text: The original diagram text
        dialect: The detected dialect name
    """

    stages: List[PipelineStage] = field(default_factory=list)
    input_text: str = ""
    dialect: str = ""

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """
        Add a pipeline stage snapshot.

        Args:
            name: Name of the stage (e.g., "parse")
            data: Dictionary of relevant data at this stage
        """
        self.stages.append(PipelineStage(name, data.copy()))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def summary(self) -> str:
        lines = [
            "=" * 60,
            "RENDER TRACE SUMMARY",
            "=" * 60,
            "",
            f"Dialect: {self.dialect}",
            f"Input: {repr(self.input_text[:100])}"
            f"{'...' if len(self.input_text) > 100 else ''}",
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  - {stage.name}")
        return "\n".join(lines)

    def dump(self) -> str:
        """Summary followed by every stage with its full data."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
