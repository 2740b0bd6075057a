# src/pipeline/context.py — v1
"""Mutable per-run execution context shared by every step of a chain.

Holds the current input, the named-variable store populated by step
outputs, execution options, and handles to the collaborators an agent
may need (tools, memory, registry).
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from agentmux.memory.base_memory_store import BaseMemoryStore
from agentmux.memory.in_memory_store import InMemoryStore
from agentmux.tools.base_tool import BaseTool

if TYPE_CHECKING:
    from agentmux.config.settings import Settings

# Reserved variable keys.
USER_INPUT_KEY = "user"
RUN_SUMMARY_KEY = "RunSummary"
AVAILABLE_AGENTS_KEY = "AvailableAgents"
DYNAMIC_PLAN_KEY = "DynamicPlan"
CHAIN_METRICS_KEY = "ChainMetrics"


class ExecutionOptions(BaseModel):
    """Options controlling metrics and summary generation."""

    collect_metrics: bool = True
    generate_summary: bool = True
    include_detailed_metrics: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> ExecutionOptions:
        return cls(
            collect_metrics=settings.collect_metrics,
            generate_summary=settings.generate_summary,
            include_detailed_metrics=settings.include_detailed_metrics,
        )


class ExecutionContext(BaseModel):
    """Mutable state for one chain run.

    Variables are overwritten on rebind. ``registry`` is an optional
    AgentRegistry handle for agents that discover peers (typed loosely
    to keep this module free of registry imports).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    user_input: str = ""
    working_directory: str | None = None
    variables: dict[str, Any] = Field(default_factory=dict)
    options: ExecutionOptions = Field(default_factory=ExecutionOptions)
    tools: dict[str, BaseTool] = Field(default_factory=dict)
    memory: BaseMemoryStore = Field(default_factory=InMemoryStore)
    registry: Any = Field(default=None, exclude=True)

    def add_tool(self, tool: BaseTool) -> None:
        self.tools[tool.name] = tool

    def get_tool(self, name: str) -> BaseTool | None:
        return self.tools.get(name)

    def get_text(self, key: str) -> str | None:
        """Return a variable rendered as text, or None if unbound."""
        if key not in self.variables:
            return None
        value = self.variables[key]
        return "" if value is None else str(value)
