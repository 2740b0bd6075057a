# src/pipeline/registry.py — v2
"""Agent registry: registration, lookup and plugin lifecycle.

Agents are held in registration order. Lookup is case-insensitive and
returns the first match, so registering a second agent under an
existing name shadows nothing: the earlier one keeps winning until it
is unregistered.

Plugin bundles are ``.py`` files discovered by ``plugin_loader``; each
concrete AgentPlugin in a bundle is instantiated, initialized and asked
for one agent, which is then registered like any other.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from agentmux.pipeline.composite import CompositeAgent
from agentmux.pipeline.plugin_kit.base_agent import BaseAgent
from agentmux.pipeline.plugin_kit.models import PluginRecord
from agentmux.pipeline.plugin_loader import (
    DEFAULT_PLUGIN_PATTERN,
    PluginImportError,
    discover_plugin_classes,
    list_bundles,
)

if TYPE_CHECKING:
    from agentmux.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
_PLANNER_MARKER = "planner"


class RegistryError(Exception):
    """Raised when an agent lookup fails."""


class AgentRegistry:
    """Registry of all agents available to chains."""

    def __init__(self) -> None:
        self._agents: list[BaseAgent] = []
        self._plugins: list[PluginRecord] = []

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    @property
    def agents(self) -> tuple[BaseAgent, ...]:
        """Registered agents in registration order."""
        return tuple(self._agents)

    @property
    def agent_names(self) -> list[str]:
        return [agent.name for agent in self._agents]

    @property
    def plugins(self) -> tuple[PluginRecord, ...]:
        return tuple(self._plugins)

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def register(self, agent: BaseAgent) -> None:
        """Append an agent. Duplicate names are allowed; the first wins on lookup."""
        if agent is None:
            raise ValueError("agent cannot be None")
        if self.get(agent.name) is not None:
            logger.debug("Agent '%s' already registered; new instance is shadowed", agent.name)
        self._agents.append(agent)
        logger.debug("Registered agent: %s v%s", agent.name, agent.version)

    def get(self, name: str) -> BaseAgent | None:
        """Case-insensitive lookup; None when no agent matches."""
        if not name:
            return None
        wanted = name.casefold()
        for agent in self._agents:
            if agent.name.casefold() == wanted:
                return agent
        return None

    def get_or_raise(self, name: str) -> BaseAgent:
        agent = self.get(name)
        if agent is None:
            raise RegistryError(f"Agent '{name}' not found in registry")
        return agent

    def unregister(self, name: str) -> int:
        """Remove every agent with this name. Returns how many were removed."""
        wanted = name.casefold()
        before = len(self._agents)
        self._agents = [a for a in self._agents if a.name.casefold() != wanted]
        removed = before - len(self._agents)
        if removed:
            logger.debug("Unregistered %d agent(s) named '%s'", removed, name)
        return removed

    # ------------------------------------------------------------------
    # Planner-facing listings
    # ------------------------------------------------------------------

    def formatted_agent_list(self) -> str:
        """One ``- Name`` line per agent, planners excluded."""
        return "\n".join(f"- {agent.name}" for agent in self._agents if not _is_planner(agent))

    def available_agents(self) -> list[tuple[str, str]]:
        """(name, description) pairs for non-planner agents."""
        return [
            (agent.name, agent.description or NO_DESCRIPTION)
            for agent in self._agents
            if not _is_planner(agent)
        ]

    # ------------------------------------------------------------------
    # Composite agents
    # ------------------------------------------------------------------

    def create_chain(self, name: str) -> CompositeAgent:
        """Create and register an empty composite agent."""
        chain = CompositeAgent(name)
        self.register(chain)
        return chain

    def create_chain_from_existing(
        self, name: str, agent_names: Iterable[str]
    ) -> CompositeAgent | None:
        """Create and register a composite of registered agents.

        Returns None, registering nothing, when any name is unknown.
        """
        chain = CompositeAgent(name)
        for agent_name in agent_names:
            agent = self.get(agent_name)
            if agent is None:
                logger.warning("Cannot build chain '%s': agent '%s' not found", name, agent_name)
                return None
            chain.add_agent(agent)
        self.register(chain)
        return chain

    # ------------------------------------------------------------------
    # Plugin lifecycle
    # ------------------------------------------------------------------

    async def load_plugin(
        self,
        bundle_path: str | Path,
        llm_client: BaseLLMClient | None = None,
        config: dict[str, Any] | None = None,
    ) -> bool:
        """Load every plugin class found in one bundle file.

        Returns True once at least one plugin class was found, even if
        individual plugins failed to initialize or build their agent.
        """
        path = Path(bundle_path)
        logger.info("Attempting to load plugin from: %s", path)

        if not path.is_file():
            logger.error("Plugin bundle not found: %s", path)
            return False

        try:
            plugin_classes = discover_plugin_classes(path)
        except PluginImportError as exc:
            logger.error("Error loading plugin bundle %s: %s", path, exc)
            return False
        except Exception as exc:
            logger.error("Error scanning plugin bundle %s: %s", path, exc)
            return False

        if not plugin_classes:
            logger.warning("No AgentPlugin implementations found in: %s", path)
            return False

        for plugin_cls in plugin_classes:
            try:
                plugin = plugin_cls()
                if not await plugin.initialize(config):
                    logger.error("Plugin initialization failed: %s", plugin_cls.__name__)
                    continue

                agent = plugin.create_agent(llm_client, config)
                self.register(agent)

                metadata = plugin.metadata.model_copy(update={"bundle_path": str(path)})
                self._plugins.append(
                    PluginRecord(metadata=metadata, plugin=plugin, agent_name=agent.name)
                )
                logger.info(
                    "Successfully loaded plugin: %s from %s", agent.name, plugin_cls.__name__
                )
            except Exception as exc:
                logger.error("Error loading plugin type %s: %s", plugin_cls.__name__, exc)

        return True

    async def load_plugins_from_directory(
        self,
        directory: str | Path,
        llm_client: BaseLLMClient | None = None,
        config: dict[str, Any] | None = None,
        pattern: str = DEFAULT_PLUGIN_PATTERN,
    ) -> int:
        """Load every matching bundle directly inside directory.

        Returns:
            Number of bundles whose load reported success.
        """
        plugin_dir = Path(directory)
        if not plugin_dir.is_dir():
            logger.warning("Plugin directory does not exist: %s", plugin_dir)
            return 0

        loaded = 0
        for bundle in list_bundles(plugin_dir, pattern):
            if await self.load_plugin(bundle, llm_client, config):
                loaded += 1

        logger.info("Loaded %d plugins from directory: %s", loaded, plugin_dir)
        return loaded

    async def unload_all_plugins(self) -> None:
        """Dispose every plugin and drop the agents named after them."""
        for record in self._plugins:
            try:
                await record.plugin.dispose()
            except Exception as exc:
                logger.error("Error disposing plugin %s: %s", record.metadata.name, exc)

        plugin_names = {record.metadata.name for record in self._plugins}
        self._agents = [a for a in self._agents if a.name not in plugin_names]
        self._plugins.clear()
        logger.info("All plugins have been unloaded")


def _is_planner(agent: BaseAgent) -> bool:
    return _PLANNER_MARKER in agent.name.casefold()
