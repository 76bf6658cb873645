"""
Logging configuration for the store.

Structured logging with JSON output for production and a
human-readable console renderer for development.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger


def setup_logging(level: str = "INFO", format_type: str = "console") -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" for production, "console" for development
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        stream=sys.stdout,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a structured logger instance.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("maintenance_added", maintenance_id=12, customer_code=1)
        ```
    """
    return structlog.get_logger(name)
