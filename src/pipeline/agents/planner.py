# src/pipeline/agents/planner.py — v1
"""Planner agent: turns a user request into a JSON step list.

The output is consumed by ``dynamic_plan.parse_dynamic_chain``; the
orchestrator excludes planners from the agent listing it hands over.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from agentmux.llm.models import is_sentinel
from agentmux.pipeline.context import AVAILABLE_AGENTS_KEY
from agentmux.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from agentmux.llm.base_client import BaseLLMClient
    from agentmux.pipeline.context import ExecutionContext

logger = logging.getLogger(__name__)

_PROMPT_PATH = Path(__file__).parent.parent / "prompts" / "planner.txt"


class PlannerError(RuntimeError):
    """Raised when the backend cannot produce a plan."""


class PlannerAgent(BaseAgent):
    """LLM planner producing ``[{"agentName": ..., "inputFrom": ..., "outputTo": ...}]``."""

    def __init__(self, llm_client: BaseLLMClient, name: str = "PlannerAgent") -> None:
        self._llm = llm_client
        self._name = name
        self._prompt_template: str | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return "Plans a chain of agents for a user request"

    def _load_prompt(self) -> str:
        """Load and cache prompt template."""
        if self._prompt_template is None:
            self._prompt_template = _PROMPT_PATH.read_text(encoding="utf-8")
        return self._prompt_template

    def _format_agents(self, context: ExecutionContext) -> str:
        """Agent listing for the prompt.

        The registry listing carries descriptions, so it supersedes the
        name-only ``AvailableAgents`` variable; that variable is only read
        when the context has no registry.
        """
        registry = context.registry
        if registry is not None:
            return "\n".join(
                f"- {name}: {description}" for name, description in registry.available_agents()
            )
        return context.get_text(AVAILABLE_AGENTS_KEY) or ""

    def format_prompt(self, context: ExecutionContext) -> str:
        return self._load_prompt().format(
            available_agents=self._format_agents(context) or "(none)",
            user_request=context.user_input,
        )

    async def execute(self, context: ExecutionContext) -> str:
        plan = await self._llm.generate(self.format_prompt(context))
        if is_sentinel(plan):
            raise PlannerError(f"Planner backend unavailable: {plan}")
        logger.debug("Planner %s produced %d chars", self._name, len(plan))
        return plan.strip()
