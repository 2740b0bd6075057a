# src/pipeline/dynamic_plan.py — v1
"""Parse a planner's JSON step list into a ChainDefinition.

Planners are asked for a JSON array such as::

    [
      {"agentName": "Summarizer", "inputFrom": "user", "outputTo": "summary"},
      {"agentName": "Translator", "inputFrom": "summary"}
    ]

Models frequently write ``"agent"`` instead of ``"agentName"``, vary the
casing of field names, or wrap the array in a Markdown code fence; all
three are tolerated. The resulting chain is not validated here.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from agentmux.pipeline.chain_model import ChainDefinition, ChainStep

logger = logging.getLogger(__name__)

DYNAMIC_CHAIN_DESCRIPTION = "Dynamically generated chain"

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*\s*\n?(.*?)\s*```", re.DOTALL)

# lower-cased JSON field -> ChainStep alias
_FIELD_ALIASES = {
    "agentname": "agentName",
    "inputfrom": "inputFrom",
    "outputto": "outputTo",
}


class PlanParseError(ValueError):
    """Raised when a planner payload cannot be turned into chain steps."""


def parse_dynamic_chain(payload: str, chain_name: str = "DynamicChain") -> ChainDefinition:
    """Build a chain from a planner's JSON step list.

    Args:
        payload: Raw planner output.
        chain_name: Name given to the resulting chain.

    Returns:
        Unvalidated ChainDefinition wrapping the parsed steps.

    Raises:
        PlanParseError: On malformed JSON, a non-list payload, or a step
            without an agent reference.
    """
    text = _strip_code_fence(payload or "")
    text = _map_agent_property(text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Failed to parse dynamic chain: {exc}") from exc

    if data is None:
        data = []
    if not isinstance(data, list):
        raise PlanParseError(
            f"Failed to parse dynamic chain: expected a JSON array of steps, got {type(data).__name__}"
        )

    steps: list[ChainStep] = []
    for i, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise PlanParseError(f"Failed to parse dynamic chain: step {i} is not an object")
        try:
            step = ChainStep.model_validate(_normalize_fields(item))
        except ValidationError as exc:
            raise PlanParseError(f"Failed to parse dynamic chain: step {i}: {exc}") from exc
        if not step.agent_name or not step.agent_name.strip():
            raise PlanParseError(f"Step {i}: Agent name cannot be empty")
        steps.append(step)

    logger.debug("Parsed dynamic chain '%s' with %d steps", chain_name, len(steps))
    return ChainDefinition(
        name=chain_name,
        description=DYNAMIC_CHAIN_DESCRIPTION,
        steps=steps,
    )


def _strip_code_fence(text: str) -> str:
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _map_agent_property(text: str) -> str:
    """Rename ``"agent":`` to ``"agentName":`` when a step relies on it.

    Only applied when the payload already parses as a list and some step
    has ``agent`` without ``agentName``; otherwise the text is returned
    unchanged for the main parser to report on.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text
    if not isinstance(data, list):
        return text

    needs_mapping = any(
        isinstance(item, dict) and "agent" in item and "agentName" not in item
        for item in data
    )
    if needs_mapping:
        return text.replace('"agent":', '"agentName":')
    return text


def _normalize_fields(item: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in item.items():
        alias = _FIELD_ALIASES.get(str(key).lower())
        if alias is not None and value is not None and alias not in normalized:
            normalized[alias] = value
    return normalized
