"""Logging and metrics for histrack."""

from histrack.observability.logging import ProgressLogger, get_logger, setup_logging

__all__ = ["ProgressLogger", "get_logger", "setup_logging"]
