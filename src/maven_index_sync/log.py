"""Structured logging for index sync sessions."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


LogLevel = int | str

NAMESPACE = "maven_index_sync"


def configure_logging(level: LogLevel = "INFO", *, json_logs: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: Logging level
        json_logs: Render JSON lines instead of console output. Implied when
            stderr is not a terminal.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logging.basicConfig(
        level=level,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
        format="%(message)s",  # structlog renders the record
    )

    interactive = sys.stderr.isatty()
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs or not interactive
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger below the package namespace (module `__name__`s pass through)."""
    if not name.startswith(NAMESPACE):
        name = f"{NAMESPACE}.{name}"
    return structlog.get_logger(name)
