# src/tools/base_tool.py — v1
"""Tool interface for agents that delegate work to helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseTool(ABC):
    """A named helper agents can invoke through ``context.tools``."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name used for lookup."""

    @abstractmethod
    async def execute(self, input: str) -> str:  # noqa: A002
        """Run the tool on input text and return its result."""
