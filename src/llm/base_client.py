# src/llm/base_client.py — v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseLLMClient(ABC):
    """Unified interface for LLM backends.

    Implementations return a sentinel string from ``llm.models`` rather
    than raising when the backend is unreachable or the local admission
    limiter refuses the request.
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a completion for a raw prompt."""

    @abstractmethod
    async def complete(self, user_input: str, system_prompt: str) -> str:
        """Generate a completion for user input under a system prompt."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. 'ollama')."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name requests are sent to."""
