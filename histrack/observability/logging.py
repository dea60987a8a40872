"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "info", json_output: bool = True) -> None:
    """Configure structlog for JSON (or console) output to stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


class ProgressLogger:
    """Progress reporting for batch runs, emitted as structured log events.

    Replaces a terminal spinner: each step is a ``progress_update`` event
    carrying ``done``/``total`` so that log consumers can render it.
    """

    def __init__(self, log: structlog.stdlib.BoundLogger, task: str, total: int) -> None:
        self._log = log.bind(task=task, total=total)
        self._total = total
        self.done = 0
        self._log.info("progress_started")

    def update(self, item: str | None = None) -> None:
        self.done += 1
        self._log.debug("progress_update", done=self.done, item=item)

    def complete(self) -> None:
        self._log.info("progress_complete", done=self.done)

    def fail(self, error: BaseException) -> None:
        self._log.error("progress_failed", done=self.done, error=str(error))
