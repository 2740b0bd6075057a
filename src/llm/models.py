# src/llm/models.py — v2
"""LLM-facing constants and small types shared by backend clients.

Backend clients never raise on transport failure or admission refusal.
They return one of the sentinel strings below so that agents and the
orchestrator can treat every output as plain text.
"""

from __future__ import annotations

from pydantic import BaseModel

RATE_LIMIT_SENTINEL = "[RATE LIMIT EXCEEDED] Please wait before making more requests."
ERROR_SENTINEL_PREFIX = "[OLLAMA ERROR]"
EMPTY_SENTINEL = "[EMPTY]"

_SENTINEL_PREFIXES = (RATE_LIMIT_SENTINEL, ERROR_SENTINEL_PREFIX, EMPTY_SENTINEL)


def is_sentinel(text: str) -> bool:
    """Whether a backend result signals refusal or failure instead of content."""
    return text.startswith(_SENTINEL_PREFIXES)


def is_rate_limited(text: str) -> bool:
    return text == RATE_LIMIT_SENTINEL


class GenerationOptions(BaseModel):
    """Sampling options forwarded to the backend."""

    temperature: float = 0.7
    max_tokens: int = 2048
