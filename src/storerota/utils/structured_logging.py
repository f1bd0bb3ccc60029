"""
Structured Logging
==================
structlog integration for run-level events (one event per generation or
override recompute).

Usage:
    from storerota.utils.structured_logging import get_structured_logger

    log = get_structured_logger("storerota.solver")
    log.info("schedule_built", days=28, warnings=3)
"""
import logging
from typing import Any, Optional, TextIO

import structlog
import structlog.contextvars


def configure_structlog(json_output: bool = False, stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs (for services).
                    If False, use colored console output (for development).
        stream: Output stream (default stdout)
    """
    if json_output:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=stream),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="%H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=stream),
            cache_logger_on_first_use=True,
        )


def get_structured_logger(name: str) -> Any:
    """
    Get a structured logger.

    Args:
        name: Logger name (e.g., "storerota.solver")

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Bind context variables for all subsequent log calls.

    Args:
        **kwargs: Context values (e.g., start_date="2024-01-01")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
