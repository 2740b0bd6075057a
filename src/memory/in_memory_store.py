# src/memory/in_memory_store.py — v1
"""Dict-backed memory store."""

from __future__ import annotations

from agentmux.memory.base_memory_store import BaseMemoryStore


class InMemoryStore(BaseMemoryStore):
    def __init__(self) -> None:
        self._storage: dict[str, str] = {}

    async def store(self, key: str, value: str) -> None:
        self._storage[key] = value

    async def retrieve(self, key: str) -> str | None:
        return self._storage.get(key)

    def __len__(self) -> int:
        return len(self._storage)
