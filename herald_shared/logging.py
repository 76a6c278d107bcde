"""Centralized logging for Herald.

This module provides the structlog-backed implementation of LoggerProtocol
used by every Herald component.

Usage:
    from herald_shared.logging import configure_logging, create_logger

    # At application startup (once)
    configure_logging(level="INFO", json_output=True)

    # Create logger for injection
    logger = create_logger("event_aggregator")
    aggregator = EventAggregator(logger=logger)
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Generator, Optional

import structlog

from herald_protocols import LoggerProtocol

# Module state
_CONFIGURED = False

_current_logger: ContextVar[Optional[LoggerProtocol]] = ContextVar(
    "current_logger",
    default=None
)


class Logger:
    """LoggerProtocol implementation backed by structlog."""

    def __init__(
        self,
        base_logger: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize logger.

        Args:
            base_logger: Underlying structlog logger (created if None)
            context: Bound context fields
        """
        self._logger = base_logger or structlog.get_logger()
        self._context = context or {}

        if self._context:
            self._logger = self._logger.bind(**self._context)

    @property
    def context(self) -> Dict[str, Any]:
        """Context fields bound to this logger."""
        return dict(self._context)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(msg, **kwargs)

    def bind(self, **kwargs: Any) -> "Logger":
        """Create child logger with additional context.

        The child wraps this logger's underlying logger, so an injected
        base logger still receives every call made through the child.
        """
        child = Logger(base_logger=self._logger.bind(**kwargs))
        child._context = {**self._context, **kwargs}
        return child


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    force: bool = False,
) -> None:
    """Configure stdlib logging and structlog.

    Should be called once at application startup; later calls are ignored
    unless ``force`` is set.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON; if False, console format
        force: Reconfigure even if already configured
    """
    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
        force=force,
    )

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def create_logger(
    component: str,
    **context: Any,
) -> LoggerProtocol:
    """Create a logger for dependency injection.

    Args:
        component: Component name (e.g., "event_aggregator")
        **context: Additional context to bind

    Returns:
        LoggerProtocol implementation
    """
    return Logger(context={"component": component, **context})


def get_current_logger() -> LoggerProtocol:
    """Get the context-bound logger, or a fresh default one."""
    logger = _current_logger.get()
    if logger is None:
        return Logger()
    return logger


def set_current_logger(logger: LoggerProtocol) -> None:
    """Set current logger for context-based access."""
    _current_logger.set(logger)


def get_component_logger(
    component: str,
    logger: Optional[LoggerProtocol] = None,
) -> LoggerProtocol:
    """Get a logger bound to a component name.

    This is the canonical way to initialize a logger in Herald components.

    Args:
        component: Component name (e.g., "listener_registry")
        logger: Optional injected logger. If None, uses context logger.

    Returns:
        LoggerProtocol bound to the component name
    """
    base_logger = logger or get_current_logger()
    return base_logger.bind(component=component)


@contextmanager
def logger_scope(logger: LoggerProtocol) -> Generator[LoggerProtocol, None, None]:
    """Make ``logger`` the current logger for the duration of the scope."""
    token = _current_logger.set(logger)
    try:
        yield logger
    finally:
        _current_logger.reset(token)


__all__ = [
    "Logger",
    "configure_logging",
    "create_logger",
    "get_component_logger",
    "get_current_logger",
    "logger_scope",
    "set_current_logger",
]
