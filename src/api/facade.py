# src/api/facade.py — v2
"""Public API facade: wire settings, registry and orchestrator together.

Usage:
    from agentmux.api.facade import run_chain_file, run_dynamic
    result = await run_chain_file("chains/translate.json", "Some text")
    print(result.output)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from agentmux.config.settings import Settings, load_settings
from agentmux.llm.client_factory import create_llm_client
from agentmux.pipeline.agents.planner import PlannerAgent
from agentmux.pipeline.agents.prompt_agent import PromptAgent
from agentmux.pipeline.context import ExecutionContext, ExecutionOptions
from agentmux.pipeline.orchestrator import ChainOrchestrator, ChainRunResult
from agentmux.pipeline.registry import AgentRegistry

if TYPE_CHECKING:
    from agentmux.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


async def build_registry(
    settings: Settings,
    llm_client: BaseLLMClient | None = None,
) -> AgentRegistry:
    """Build a registry from settings.

    Registers one PromptAgent per ``settings.agents`` entry, the planner
    (unless disabled) and every plugin bundle in ``plugin_directory``.

    Args:
        settings: Application settings.
        llm_client: Client shared by every agent. When omitted, one is
            created from settings, plus a dedicated client for each agent
            that overrides the model or rate limit.
    """
    registry = AgentRegistry()
    injected = llm_client is not None
    shared_client = llm_client or create_llm_client(
        settings.llm_provider, settings.llm_model, settings
    )

    for name, agent_cfg in settings.agents.items():
        client = shared_client
        if not injected and (agent_cfg.model or agent_cfg.max_requests_per_minute):
            overrides = {}
            if agent_cfg.max_requests_per_minute:
                overrides["max_requests_per_minute"] = agent_cfg.max_requests_per_minute
            client = create_llm_client(
                settings.llm_provider,
                agent_cfg.model or settings.llm_model,
                settings,
                **overrides,
            )
        registry.register(
            PromptAgent(name, agent_cfg.system_prompt, client, agent_cfg.description)
        )

    if settings.planner_enabled:
        registry.register(PlannerAgent(shared_client, settings.planner_agent_name))

    if settings.plugin_directory is not None:
        await registry.load_plugins_from_directory(
            settings.plugin_directory,
            llm_client=shared_client,
            pattern=settings.plugin_pattern,
        )

    logger.info("Registry ready with %d agents", len(registry))
    return registry


def resolve_chain_path(path: str | Path, settings: Settings) -> Path:
    """Resolve a chain path, falling back to ``settings.chains_directory``."""
    candidate = Path(path)
    if candidate.is_file() or candidate.is_absolute():
        return candidate
    fallback = settings.chains_directory / candidate
    return fallback if fallback.is_file() else candidate


async def run_chain_file(
    path: str | Path,
    user_input: str,
    settings: Settings | None = None,
    registry: AgentRegistry | None = None,
    llm_client: BaseLLMClient | None = None,
    generate_summary: bool = True,
) -> ChainRunResult:
    """Load a chain file and run it against user_input.

    Args:
        path: Chain JSON file (relative paths also tried under chains_directory).
        user_input: Initial input, also bound as the ``user`` variable.
        settings: Global settings. Loaded from .env if None.
        registry: Pre-built registry. Built from settings if None.
        llm_client: Client used when building the registry.
        generate_summary: Append the run summary report to the output.
    """
    settings = settings or load_settings()
    owns_registry = registry is None
    if registry is None:
        registry = await build_registry(settings, llm_client)

    context = ExecutionContext(
        user_input=user_input,
        options=ExecutionOptions.from_settings(settings),
        registry=registry,
    )
    try:
        orchestrator = ChainOrchestrator(registry)
        return await orchestrator.run_chain_from_file(
            resolve_chain_path(path, settings), context, generate_summary
        )
    finally:
        if owns_registry:
            await registry.unload_all_plugins()


async def run_dynamic(
    request: str,
    settings: Settings | None = None,
    registry: AgentRegistry | None = None,
    llm_client: BaseLLMClient | None = None,
) -> ChainRunResult:
    """Plan a chain for request with the configured planner and run it."""
    settings = settings or load_settings()
    owns_registry = registry is None
    if registry is None:
        registry = await build_registry(settings, llm_client)

    context = ExecutionContext(
        options=ExecutionOptions.from_settings(settings),
        registry=registry,
    )
    try:
        orchestrator = ChainOrchestrator(registry)
        return await orchestrator.run_dynamic_chain(
            settings.planner_agent_name, request, context
        )
    finally:
        if owns_registry:
            await registry.unload_all_plugins()
