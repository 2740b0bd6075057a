# src/pipeline/composite.py — v1
"""Composite agent: runs a fixed list of child agents in order.

Each child sees the context as left by the previous one; outputs are
bound under the child's name. The composite is itself a BaseAgent, so
it can be registered and used as a step in a chain.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentmux.pipeline.context import CHAIN_METRICS_KEY
from agentmux.pipeline.plugin_kit.base_agent import BaseAgent
from agentmux.tracking.models import StepMetrics

if TYPE_CHECKING:
    from agentmux.pipeline.context import ExecutionContext

logger = logging.getLogger(__name__)

EMPTY_CHAIN_OUTPUT = "Agent chain is empty."


class CompositeAgent(BaseAgent):
    """Sequential agent chain exposed as a single agent."""

    def __init__(self, name: str, description: str = "") -> None:
        if not name or not name.strip():
            raise ValueError("Composite agent name cannot be empty")
        self._name = name
        self._description = description
        self._agents: list[BaseAgent] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description or f"Chain of {len(self._agents)} agents"

    @property
    def agents(self) -> list[BaseAgent]:
        return list(self._agents)

    def add_agent(self, agent: BaseAgent) -> CompositeAgent:
        if agent is None:
            raise ValueError("agent cannot be None")
        self._agents.append(agent)
        return self

    async def execute(self, context: ExecutionContext) -> str:
        if not self._agents:
            return EMPTY_CHAIN_OUTPUT

        output = ""
        chain_metrics: list[StepMetrics] = []

        for agent in self._agents:
            if context.options.collect_metrics:
                output, metrics = await agent.execute_with_metrics(context)
                if metrics is not None:
                    chain_metrics.append(metrics)
            else:
                output = await agent.execute(context)
            context.variables[agent.name] = output
            logger.debug("Composite '%s': %s produced %d chars", self._name, agent.name, len(output))

        if chain_metrics:
            context.variables[CHAIN_METRICS_KEY] = chain_metrics

        return output
