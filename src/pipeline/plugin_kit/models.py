# src/pipeline/plugin_kit/models.py — v2
"""Plugin models: PluginMetadata, PluginRecord."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PluginMetadata(BaseModel):
    """Metadata a plugin declares about the agent it contributes.

    ``name`` is also the name of the agent the plugin creates; teardown
    removes registry entries by this name.
    """

    name: str
    description: str = ""
    version: str = "1.0.0"
    bundle_path: str | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    supported_tasks: list[str] = Field(default_factory=list)


class PluginRecord(BaseModel):
    """A loaded plugin and the agent it produced."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    metadata: PluginMetadata
    plugin: Any
    agent_name: str
    initialized: bool = True
