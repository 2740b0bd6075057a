# src/llm/adapters/ollama_adapter.py — v2
"""Ollama local LLM adapter implementing BaseLLMClient.

Uses the ollama Python SDK. Every request first probes the admission
limiter; refusals and transport failures come back as sentinel text.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import ollama

from agentmux.llm.base_client import BaseLLMClient
from agentmux.llm.models import (
    EMPTY_SENTINEL,
    ERROR_SENTINEL_PREFIX,
    RATE_LIMIT_SENTINEL,
    GenerationOptions,
)
from agentmux.llm.rate_limiter import AdmissionLimiter

logger = logging.getLogger(__name__)


class OllamaClient(BaseLLMClient):
    """Ollama local inference client.

    Args:
        model: Ollama model tag.
        host: Ollama server URL.
        max_requests_per_minute: Admission ceiling for this client.
        options: Sampling options forwarded with each request.
        limiter: Pre-built limiter to share between clients (overrides
            max_requests_per_minute).
    """

    def __init__(
        self,
        model: str = "llama3",
        host: str = "http://localhost:11434",
        max_requests_per_minute: int = 60,
        options: GenerationOptions | None = None,
        limiter: AdmissionLimiter | None = None,
        **kwargs: Any,
    ):
        self._model = model
        self._host = host
        self._options = options or GenerationOptions()
        self._limiter = limiter or AdmissionLimiter(max_requests_per_minute)
        self._client = ollama.AsyncClient(host=host)

    async def generate(self, prompt: str) -> str:
        return await self._send(prompt)

    async def complete(self, user_input: str, system_prompt: str) -> str:
        return await self._send(f"{system_prompt}\n\n{user_input}")

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model(self) -> str:
        return self._model

    @property
    def limiter(self) -> AdmissionLimiter:
        return self._limiter

    async def _send(self, prompt: str) -> str:
        if not self._limiter.try_acquire():
            logger.warning("Ollama request refused by admission limiter (model=%s)", self._model)
            return RATE_LIMIT_SENTINEL

        options = {
            "num_predict": self._options.max_tokens,
            "temperature": self._options.temperature,
        }
        t0 = time.monotonic()
        try:
            resp = await self._client.generate(
                model=self._model, prompt=prompt, stream=False, options=options,
            )
        except ollama.ResponseError as exc:
            logger.error("Ollama returned %s: %s", exc.status_code, exc.error)
            return f"{ERROR_SENTINEL_PREFIX} {exc.status_code}"
        except Exception as exc:  # transport failures surface as a sentinel
            logger.error("Ollama request failed: %s", exc)
            return f"{ERROR_SENTINEL_PREFIX} {exc}"

        latency = int((time.monotonic() - t0) * 1000)
        text = resp["response"] if resp is not None else None
        logger.debug("Ollama %s answered in %dms", self._model, latency)
        return text or EMPTY_SENTINEL
