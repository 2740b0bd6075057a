# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides scripted agents, a mocked LLM client, a populated registry and
chain builders. No external dependencies — the LLM backend is mocked.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from agentmux.llm.base_client import BaseLLMClient
from agentmux.pipeline.chain_model import ChainDefinition, ChainStep
from agentmux.pipeline.context import ExecutionContext
from agentmux.pipeline.plugin_kit.base_agent import BaseAgent
from agentmux.pipeline.registry import AgentRegistry


class ScriptedAgent(BaseAgent):
    """Agent whose output is computed from its input by a plain function."""

    def __init__(self, name: str, transform=None, description: str = "") -> None:
        self._name = name
        self._transform = transform or (lambda text: f"{name}({text})")
        self._description = description
        self.inputs: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, context: ExecutionContext) -> str:
        self.inputs.append(context.user_input)
        return self._transform(context.user_input)


class FailingAgent(BaseAgent):
    def __init__(self, name: str = "Broken", message: str = "boom") -> None:
        self._name = name
        self._message = message

    @property
    def name(self) -> str:
        return self._name

    async def execute(self, context: ExecutionContext) -> str:
        raise RuntimeError(self._message)


# === FIXTURES: Agents ===


@pytest.fixture
def make_agent():
    """Factory for ScriptedAgent instances."""

    def _make(name: str, transform=None, description: str = "") -> ScriptedAgent:
        return ScriptedAgent(name, transform, description)

    return _make


@pytest.fixture
def failing_agent() -> FailingAgent:
    return FailingAgent()


@pytest.fixture
def summarizer() -> ScriptedAgent:
    return ScriptedAgent("Summarizer", lambda text: "short", "Summarizes text")


@pytest.fixture
def translator() -> ScriptedAgent:
    return ScriptedAgent("Translator", lambda text: "court", "Translates text to French")


@pytest.fixture
def registry(summarizer: ScriptedAgent, translator: ScriptedAgent) -> AgentRegistry:
    reg = AgentRegistry()
    reg.register(summarizer)
    reg.register(translator)
    return reg


# === FIXTURES: Context and chains ===


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(user_input="long text")


@pytest.fixture
def make_chain():
    """Factory: make_chain("name", ("Agent", input_from, output_to), ...)."""

    def _make(name: str, *steps: tuple[str, str | None, str | None], **kwargs: Any) -> ChainDefinition:
        return ChainDefinition(
            name=name,
            steps=[
                ChainStep(agent_name=agent, input_from=source, output_to=target)
                for agent, source, target in steps
            ],
            **kwargs,
        )

    return _make


@pytest.fixture
def summarize_translate_chain(make_chain) -> ChainDefinition:
    return make_chain(
        "SummarizeTranslate",
        ("Summarizer", "user", "summary"),
        ("Translator", "summary", "translation"),
    )


# === FIXTURES: LLM ===


@pytest.fixture
def mock_llm() -> MagicMock:
    """Mock BaseLLMClient with canned async completions."""
    client = MagicMock(spec=BaseLLMClient)
    client.generate = AsyncMock(return_value="generated")
    client.complete = AsyncMock(return_value="completed")
    client.provider_name = "mock"
    client.model = "mock-model"
    return client
