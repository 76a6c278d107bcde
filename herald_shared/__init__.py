"""Shared utilities for Herald.

This package provides common utilities that can be used by all layers
without creating circular dependencies. It sits at L0 alongside
herald_protocols.

Exports:
- Logging: configure_logging, create_logger, get_component_logger,
  get_current_logger, set_current_logger, logger_scope, Logger
"""

from herald_shared.logging import (
    Logger,
    configure_logging,
    create_logger,
    get_component_logger,
    get_current_logger,
    logger_scope,
    set_current_logger,
)

__all__ = [
    "Logger",
    "configure_logging",
    "create_logger",
    "get_component_logger",
    "get_current_logger",
    "logger_scope",
    "set_current_logger",
]
