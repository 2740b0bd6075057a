# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings. Every field
can be overridden with an ``AGENTMUX_`` prefixed environment variable;
``AGENTMUX_AGENTS`` takes a JSON object of per-agent configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class AgentConfig(BaseModel):
    """Configuration of one prompt-driven agent."""

    system_prompt: str
    description: str = ""
    model: str | None = None
    max_requests_per_minute: int | None = None

    @field_validator("system_prompt")
    @classmethod
    def validate_system_prompt(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("system_prompt is required for agent")
        return v


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_prefix="AGENTMUX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM ===
    llm_provider: str = "ollama"
    llm_model: str = "llama3"
    ollama_base_url: str = "http://localhost:11434"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2048
    llm_max_requests_per_minute: int = 60

    # === Agents ===
    agents: dict[str, AgentConfig] = {}

    # === Planner ===
    planner_agent_name: str = "PlannerAgent"
    planner_enabled: bool = True

    # === Plugins ===
    plugin_directory: Path | None = None
    plugin_pattern: str = "agentmux_plugin_*.py"

    # === Paths ===
    chains_directory: Path = Path("chains")

    # === Execution defaults ===
    collect_metrics: bool = True
    generate_summary: bool = True
    include_detailed_metrics: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("llm_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("llm_temperature must be within [0.0, 2.0]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not self.llm_provider.strip():
            errors.append("LLM provider is required")

        if not self.llm_model.strip():
            errors.append("LLM model is required")

        if self.llm_max_requests_per_minute <= 0:
            errors.append("LLM_MAX_REQUESTS_PER_MINUTE must be > 0")

        parsed = urlparse(self.ollama_base_url)
        if self.ollama_base_url and (parsed.scheme not in ("http", "https") or not parsed.netloc):
            errors.append(f"OLLAMA_BASE_URL '{self.ollama_base_url}' is not a valid absolute URL")

        for name, agent in self.agents.items():
            if agent.max_requests_per_minute is not None and agent.max_requests_per_minute <= 0:
                errors.append(f"Agent '{name}': max_requests_per_minute must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
