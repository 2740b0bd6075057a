# src/pipeline/chain_model.py — v1
"""Declarative chain model: ChainStep, ChainDefinition, validation, persistence.

A chain is a named, ordered list of steps. Each step names an agent, an
optional input source (``"user"`` or another step's output key) and an
optional output key (defaulting to the agent name).

Validation collects every error instead of failing fast:
  1. name present and <= 100 chars
  2. 1..50 steps
  3. per-step agent name present and <= 50 chars
  4. resolved output keys pairwise distinct (scanned in order)
  5. every non-"user" input_from matches some output key (set membership,
     so forward references are accepted)
  6. no cycle in the input_from -> output_key dependency graph

Checks 5 and 6 are independent; either may fire without the other.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MAX_CHAIN_NAME_LENGTH = 100
MAX_AGENT_NAME_LENGTH = 50
MIN_STEPS = 1
MAX_STEPS = 50
USER_INPUT_SOURCE = "user"


class ChainFormatError(Exception):
    """Raised when a persisted chain cannot be read, parsed or saved."""


@dataclass
class ChainValidationResult:
    """Outcome of ChainDefinition.validate_chain()."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


class ChainStep(BaseModel):
    """One position in a chain."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    agent_name: str = Field(default="", alias="agentName")
    input_from: str | None = Field(default=None, alias="inputFrom")
    output_to: str | None = Field(default=None, alias="outputTo")

    @property
    def resolved_output_key(self) -> str:
        """Binding key for this step's output (explicit or agent name)."""
        return self.output_to or self.agent_name

    @property
    def references_variable(self) -> bool:
        """Whether input_from names another step's output."""
        return bool(self.input_from) and self.input_from != USER_INPUT_SOURCE


class ChainDefinition(BaseModel):
    """Named, ordered sequence of steps with structural validation."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str | None = None
    steps: list[ChainStep] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_chain(self) -> ChainValidationResult:
        """Run every structural check and collect all errors."""
        errors: list[str] = []

        if not self.name or not self.name.strip():
            errors.append("Chain name is required")
        elif len(self.name) > MAX_CHAIN_NAME_LENGTH:
            errors.append(f"Chain name cannot exceed {MAX_CHAIN_NAME_LENGTH} characters")

        if len(self.steps) < MIN_STEPS:
            errors.append("Chain must have at least one step")
        elif len(self.steps) > MAX_STEPS:
            errors.append(f"Chain cannot have more than {MAX_STEPS} steps")

        output_keys: set[str] = set()
        # dict keeps first-seen order for stable error messages
        input_keys: dict[str, None] = {}

        for i, step in enumerate(self.steps, start=1):
            prefix = f"Step {i}"

            if not step.agent_name or not step.agent_name.strip():
                errors.append(f"{prefix}: Agent name is required")
            elif len(step.agent_name) > MAX_AGENT_NAME_LENGTH:
                errors.append(
                    f"{prefix}: Agent name cannot exceed {MAX_AGENT_NAME_LENGTH} characters"
                )

            if step.output_to:
                if step.output_to in output_keys:
                    errors.append(
                        f"{prefix}: OutputTo key '{step.output_to}' is already used by another step"
                    )
                else:
                    output_keys.add(step.output_to)
            else:
                default_key = step.agent_name
                if default_key in output_keys:
                    errors.append(
                        f"{prefix}: Default OutputTo key '{default_key}' conflicts with another step"
                    )
                else:
                    output_keys.add(default_key)

            if step.references_variable:
                input_keys[step.input_from] = None  # type: ignore[index]

        for input_key in input_keys:
            if input_key not in output_keys:
                errors.append(f"InputFrom '{input_key}' references an output that doesn't exist")

        if self.has_circular_dependencies():
            errors.append("Chain contains circular dependencies")

        return ChainValidationResult(valid=not errors, errors=errors)

    def is_valid(self) -> bool:
        return self.validate_chain().valid

    def dependency_graph(self) -> nx.DiGraph:
        """Directed graph with an edge input_from -> output key per step."""
        graph = nx.DiGraph()
        for step in self.steps:
            output_key = step.resolved_output_key
            graph.add_node(output_key)
            if step.references_variable:
                graph.add_edge(step.input_from, output_key)
        return graph

    def has_circular_dependencies(self) -> bool:
        """Depth-first cycle search over the dependency graph."""
        graph = self.dependency_graph()
        try:
            cycle = nx.find_cycle(graph, orientation="original")
        except nx.NetworkXNoCycle:
            return False
        logger.debug(
            "Chain '%s' has a dependency cycle: %s",
            self.name, " -> ".join(str(edge[0]) for edge in cycle),
        )
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serializable mapping using the persisted camelCase field names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> ChainDefinition:
        """Parse a chain from JSON text without validating its structure.

        Raises:
            ChainFormatError: If the text is not a JSON chain object.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ChainFormatError(f"Invalid chain JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ChainFormatError("Chain JSON must be an object")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ChainFormatError(f"Malformed chain definition: {exc}") from exc

    @classmethod
    def load_from_file(cls, path: str | Path) -> ChainDefinition:
        """Load and validate a chain from a JSON file.

        Raises:
            ValueError: If path is empty.
            FileNotFoundError: If the file does not exist.
            ChainFormatError: If the content is malformed or the chain is invalid.
        """
        if path is None or not str(path).strip():
            raise ValueError("File path cannot be null or empty")

        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Chain file not found: {file_path}")

        chain = cls.from_json(file_path.read_text(encoding="utf-8"))
        result = chain.validate_chain()
        if not result.valid:
            raise ChainFormatError(f"Loaded chain is invalid: {', '.join(result.errors)}")

        logger.debug("Loaded %s from %s", chain.summary(), file_path)
        return chain

    def save_to_file(self, path: str | Path) -> Path:
        """Validate then write the chain as indented JSON.

        Raises:
            ValueError: If path is empty.
            ChainFormatError: If the chain is invalid or cannot be written.
        """
        if path is None or not str(path).strip():
            raise ValueError("File path cannot be null or empty")

        result = self.validate_chain()
        if not result.valid:
            raise ChainFormatError(f"Cannot save invalid chain: {', '.join(result.errors)}")

        file_path = Path(path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(self.to_json(), encoding="utf-8")
        except OSError as exc:
            raise ChainFormatError(f"Failed to save chain to {file_path}: {exc}") from exc
        return file_path

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def clone(self) -> ChainDefinition:
        """Deep copy of this chain."""
        return self.model_copy(deep=True)

    def summary(self) -> str:
        """Single-line description for logs and listings."""
        text = f"Chain: {self.name}"
        if self.description:
            text += f" - {self.description}"
        return f"{text} ({len(self.steps)} steps)"


def load_chain(path: str | Path) -> ChainDefinition:
    """Shortcut for ChainDefinition.load_from_file()."""
    return ChainDefinition.load_from_file(path)
