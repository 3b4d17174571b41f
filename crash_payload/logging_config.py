"""Structured logging configuration.

All modules obtain their logger through :func:`get_logger` and log
snake_case event names with key/value context.
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", json_format: bool = False, log_file: str | None = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Render events as JSON lines instead of console output.
        log_file: Optional file path; events are also written there.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(format="%(message)s", level=log_level, handlers=handlers, force=True)

    renderer: Any = structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
