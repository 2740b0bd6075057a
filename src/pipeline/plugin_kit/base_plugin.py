# src/pipeline/plugin_kit/base_plugin.py — v1
"""Contract for externally supplied agent bundles.

A bundle is a ``agentmux_plugin_*.py`` file defining one or more
concrete ``AgentPlugin`` subclasses (or listing them explicitly in a
module-level ``AGENTMUX_PLUGINS``). Each plugin is instantiated with no
arguments, initialized, then asked for exactly one agent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from agentmux.pipeline.plugin_kit.models import PluginMetadata

if TYPE_CHECKING:
    from agentmux.llm.base_client import BaseLLMClient
    from agentmux.pipeline.plugin_kit.base_agent import BaseAgent


class AgentPlugin(ABC):
    """Lifecycle interface implemented by plugin bundles."""

    @property
    @abstractmethod
    def metadata(self) -> PluginMetadata:
        """Name, description and version of the contributed agent."""

    @abstractmethod
    def create_agent(
        self,
        llm_client: BaseLLMClient | None = None,
        config: dict[str, Any] | None = None,
    ) -> BaseAgent:
        """Create the agent instance this plugin contributes."""

    async def initialize(self, config: dict[str, Any] | None = None) -> bool:
        """Prepare plugin resources. Return False to be skipped."""
        return True

    async def dispose(self) -> None:
        """Release plugin resources on unload."""
