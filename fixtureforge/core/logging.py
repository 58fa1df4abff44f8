"""Structured logging with structlog and scenario_key context."""

import logging
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

from fixtureforge.core.config import get_settings

# Context variable for the scenario currently being generated or loaded
scenario_key_ctx: ContextVar[str | None] = ContextVar("scenario_key", default=None)


def add_scenario_key(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add scenario_key from context to log events."""
    scenario_key = scenario_key_ctx.get()
    if scenario_key:
        event_dict.setdefault("scenario_key", scenario_key)
    return event_dict


@contextmanager
def bind_scenario(key: str) -> Iterator[None]:
    """Bind a scenario key to every log event emitted inside the block."""
    token = scenario_key_ctx.set(key)
    try:
        yield
    finally:
        scenario_key_ctx.reset(token)


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for the fixture engine.

    Args:
        level: Override for settings.log_level (e.g. "DEBUG" for verbose CLIs).
    """
    settings = get_settings()
    level = level or settings.log_level

    # Common processors (compatible with PrintLoggerFactory)
    shared_processors: list[structlog.types.Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_scenario_key,
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger with scenario_key binding.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger
