# src/pipeline/plugin_kit/base_agent.py — v2
"""Standard agent interface shared by primitive, composite and plugin agents."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from agentmux.tracking.models import StepMetrics

if TYPE_CHECKING:
    from agentmux.pipeline.context import ExecutionContext


class BaseAgent(ABC):
    """Standard interface for all agents.

    Subclasses provide ``name`` and ``execute``. The orchestrator only
    ever talks to this interface, so it cannot tell a plugin agent from
    a built-in one.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique agent identifier used for lookup (case-insensitive)."""

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        """Human-readable description, shown to planners."""
        return ""

    @abstractmethod
    async def execute(self, context: ExecutionContext) -> str:
        """Execute the agent against the current context.

        Args:
            context: Per-run execution context; ``context.user_input``
                holds the resolved input for this step.

        Returns:
            The agent's output text.
        """

    async def execute_with_metrics(
        self,
        context: ExecutionContext,
        collect_metrics: bool = True,
    ) -> tuple[str, StepMetrics | None]:
        """Execute and optionally time the invocation."""
        start_time = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        result = await self.execute(context)
        duration_ms = (time.perf_counter() - t0) * 1000.0
        end_time = datetime.now(timezone.utc)

        if not collect_metrics:
            return result, None

        return result, StepMetrics(
            agent_name=self.name,
            start_time=start_time,
            end_time=end_time,
            duration_ms=duration_ms,
            custom_metrics=self.build_custom_metrics(context, result),
        )

    def build_custom_metrics(self, context: ExecutionContext, output: str) -> dict[str, Any]:
        """Agent-specific metrics attached to StepMetrics. Override as needed."""
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
