# src/logging/context.py — v3
"""Run-scoped logging context.

The orchestrator binds the run id and chain name when a run starts and
the agent/step before each invocation; formatters read the snapshot.
A single ContextVar holds the whole snapshot so concurrent asyncio tasks
never see a half-updated context.
"""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class LogContext:
    run_id: str | None = None
    chain: str | None = None
    agent: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Bound fields only, for the JSON ``context`` object."""
        return {key: value for key, value in asdict(self).items() if value is not None}


_EMPTY = LogContext()
_current: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "agentmux_log_context", default=_EMPTY
)


def get_context() -> LogContext:
    return _current.get()


def set_run_context(run_id: str, chain: str) -> None:
    """Start a run: bind run id and chain, drop any agent/step."""
    _current.set(LogContext(run_id=run_id, chain=chain))


def set_agent_context(agent: str, step: str | None = None) -> None:
    """Bind the agent about to run, keeping the run fields."""
    _current.set(replace(_current.get(), agent=agent, step=step))


def clear_context() -> None:
    _current.set(_EMPTY)
