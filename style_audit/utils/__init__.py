"""Utility modules for the style audit engine."""

from .logging import configure_logging, get_logger, log_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "log_operation",
]
