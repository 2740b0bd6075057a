# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

No external services required: ScriptedLLMClient stands in for Ollama
and answers by matching the system prompt (or the raw prompt for
planner calls).
"""

from __future__ import annotations

from typing import Callable

import pytest

from agentmux.config.settings import Settings
from agentmux.llm.base_client import BaseLLMClient


class ScriptedLLMClient(BaseLLMClient):
    """Deterministic BaseLLMClient with per-system-prompt handlers."""

    def __init__(self, plan: str = "[]") -> None:
        self.plan = plan
        self.handlers: dict[str, Callable[[str], str]] = {}
        self.calls: list[tuple[str, str | None]] = []

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def model(self) -> str:
        return "scripted-1"

    async def generate(self, prompt: str) -> str:
        self.calls.append((prompt, None))
        return self.plan

    async def complete(self, user_input: str, system_prompt: str) -> str:
        self.calls.append((user_input, system_prompt))
        handler = self.handlers.get(system_prompt)
        return handler(user_input) if handler else f"[{system_prompt}] {user_input}"


@pytest.fixture
def scripted_llm() -> ScriptedLLMClient:
    llm = ScriptedLLMClient()
    llm.handlers["Summarize."] = lambda text: text.split(".")[0] + "."
    llm.handlers["Translate to French."] = lambda text: text.replace("cat", "chat")
    llm.handlers["Shout."] = lambda text: text.upper()
    return llm


@pytest.fixture
def integration_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        agents={
            "Summarizer": {"system_prompt": "Summarize.", "description": "Summarizes text"},
            "Translator": {"system_prompt": "Translate to French.", "description": "Translates to French"},
            "Shouter": {"system_prompt": "Shout.", "description": "Upper-cases text"},
        },
        chains_directory=tmp_path,
    )
