# src/logging/logger.py — v3
"""Formatters and setup for the ``agentmux`` logger tree.

Every module logs through ``logging.getLogger(__name__)``; since the
package is importable as ``agentmux``, all of them hang below
ROOT_LOGGER_NAME and pick up the handlers installed here.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from agentmux.logging.context import LogContext, get_context

ROOT_LOGGER_NAME = "agentmux"


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; run context under ``context``, extras under ``data``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        bound = get_context().as_dict()
        if bound:
            payload["context"] = bound
        data = getattr(record, "data", None)
        if data:
            payload["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``2026-01-01 12:00:00 [INFO    ] name <chain> [agent] (1/3) - message``."""

    def format(self, record: logging.LogRecord) -> str:
        head = f"{_timestamp(record):%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
        tag = _context_tag(get_context())
        line = f"{head} {tag} - {record.getMessage()}" if tag else f"{head} - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _context_tag(ctx: LogContext) -> str:
    parts = []
    if ctx.chain:
        parts.append(f"<{ctx.chain}>")
    if ctx.agent:
        parts.append(f"[{ctx.agent}]")
    if ctx.step:
        parts.append(f"({ctx.step})")
    return " ".join(parts)


def get_logger(name: str) -> logging.Logger:
    """Logger below the agentmux root, for code outside the package."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """(Re)configure the agentmux logger: stderr plus an optional rotating file.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Log file path; None logs to stderr only.
        rotation: Size that triggers rotation, e.g. "10MB".
        retention: Rotated files kept.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from agentmux.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
