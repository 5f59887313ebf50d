"""structlog setup for the style audit engine.

Engine modules log through ``structlog.get_logger(__name__)`` and bind a
``component``. Per-element anomalies (unparseable colors, skipped text,
solver caps) are debug events; each audit pass emits one info event with
its counts. Logs go to stderr so the CLI can keep stdout for the summary.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog


def _processors(include_timestamp: bool) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.extend([
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ])
    return processors


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """Route structlog through stdlib logging at ``level``.

    Args:
        level: Log level name, case-insensitive (DEBUG, INFO, WARNING, ERROR)
        json_format: Render one JSON object per event instead of console lines
        include_timestamp: Add an ISO timestamp to every event

    Raises:
        ValueError: ``level`` is not a logging level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )

    renderer = structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=_processors(include_timestamp) + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Get a logger, optionally with bound context such as ``component``."""
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[structlog.BoundLogger] = None,
    **context,
) -> Iterator[dict[str, Any]]:
    """Log the start, outcome and duration of one operation.

    The yielded dict collects result fields; they are attached to the
    completion (or failure) event together with ``duration_ms``. Exceptions
    are logged and re-raised.

    Example:
        with log_operation("run_audit", self.log, url=tree.url) as op:
            ...
            op["issues"] = len(issues)
    """
    log = (logger or get_logger()).bind(operation=operation, **context)
    result: dict[str, Any] = {"success": False, "error": None}
    started = time.perf_counter()

    log.debug(f"{operation} started")
    try:
        yield result
    except Exception as e:
        result["error"] = str(e)
        result["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        log.error(f"{operation} failed", **result)
        raise

    result["success"] = True
    result["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
    log.info(f"{operation} completed", **result)
