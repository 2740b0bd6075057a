# src/memory/base_memory_store.py — v1
"""Abstract scratch memory shared by agents across steps."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseMemoryStore(ABC):
    """Key/value store agents use to persist data between executions."""

    @abstractmethod
    async def store(self, key: str, value: str) -> None:
        """Store a value under key, replacing any previous value."""

    @abstractmethod
    async def retrieve(self, key: str) -> str | None:
        """Return the stored value, or None if the key is unknown."""
