# src/pipeline/agents/prompt_agent.py — v1
"""Generic LLM-backed agent driven by a system prompt.

Most chain steps (summarizers, translators, reviewers) are nothing more
than a system prompt applied to the step input, so they are configured
as PromptAgent instances rather than subclasses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from agentmux.llm.models import is_rate_limited, is_sentinel
from agentmux.pipeline.plugin_kit.base_agent import BaseAgent

if TYPE_CHECKING:
    from agentmux.llm.base_client import BaseLLMClient
    from agentmux.pipeline.context import ExecutionContext

logger = logging.getLogger(__name__)


class PromptAgent(BaseAgent):
    """Sends the step input to the LLM under a fixed system prompt.

    Backend sentinels (rate limit, transport error, empty response) are
    returned as the step output, not raised.
    """

    def __init__(
        self,
        name: str,
        system_prompt: str,
        llm_client: BaseLLMClient,
        description: str = "",
        version: str = "1.0.0",
    ) -> None:
        if not name or not name.strip():
            raise ValueError("Agent name cannot be empty")
        if not system_prompt or not system_prompt.strip():
            raise ValueError(f"Agent {name}: system prompt cannot be empty")
        self._name = name
        self._system_prompt = system_prompt
        self._llm = llm_client
        self._description = description
        self._version = version

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    @property
    def description(self) -> str:
        return self._description

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def execute(self, context: ExecutionContext) -> str:
        output = await self._llm.complete(context.user_input, self._system_prompt)
        if is_sentinel(output):
            logger.warning("Agent %s got backend sentinel: %s", self._name, output)
        return output

    def build_custom_metrics(self, context: ExecutionContext, output: str) -> dict[str, Any]:
        return {
            "input_chars": len(context.user_input),
            "output_chars": len(output),
            "rate_limited": is_rate_limited(output),
        }
