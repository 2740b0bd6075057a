# src/llm/client_factory.py — v3
"""Factory: instantiate an LLM client from a provider name."""

from __future__ import annotations

import importlib
import logging

from agentmux.config.settings import Settings
from agentmux.llm.base_client import BaseLLMClient
from agentmux.llm.models import GenerationOptions

logger = logging.getLogger(__name__)

# Registry of provider name → client class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "ollama": "agentmux.llm.adapters.ollama_adapter.OllamaClient",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct client from provider name.

    Args:
        provider: Provider identifier (ollama, or a registered custom one).
        model: Model name (e.g. llama3).
        settings: Application settings (host, rate limit, sampling).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    client_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if settings is not None:
        init_kwargs.setdefault("max_requests_per_minute", settings.llm_max_requests_per_minute)
        init_kwargs.setdefault(
            "options",
            GenerationOptions(
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
            ),
        )
        if provider == "ollama":
            init_kwargs.setdefault("host", settings.ollama_base_url)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return client_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider client.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
