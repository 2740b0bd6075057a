# src/tracking/models.py — v2
"""Tracking models: StepMetrics and RunSummary."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StepMetrics(BaseModel):
    """Timing of a single agent invocation."""

    agent_name: str
    start_time: datetime
    end_time: datetime
    duration_ms: float
    custom_metrics: dict[str, Any] = Field(default_factory=dict)


class RunSummary(BaseModel):
    """Aggregated metrics of one completed chain run.

    Built once after the last step succeeds and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    start_time: datetime
    end_time: datetime
    total_duration_ms: float
    step_count: int
    metrics: list[StepMetrics] = Field(default_factory=list)

    def create_report(self, include_detailed_metrics: bool = True) -> str:
        """Render a human-readable report of the run."""
        lines = [
            f"--- Run Summary: {self.name} ---",
            f"Start Time: {_fmt_time(self.start_time)}",
            f"End Time: {_fmt_time(self.end_time)}",
            f"Total Execution Time: {self.total_duration_ms:.2f} ms",
            f"Agents Executed: {self.step_count}",
        ]

        if include_detailed_metrics and self.metrics:
            lines.append("")
            lines.append("Detailed Agent Metrics:")
            for step in self.metrics:
                lines.append(f"  - {step.agent_name}: {step.duration_ms:.2f} ms")
                for key, value in step.custom_metrics.items():
                    lines.append(f"    * {key}: {value}")

        return "\n".join(lines) + "\n"


def _fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}"
