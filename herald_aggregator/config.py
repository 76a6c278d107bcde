"""Aggregator configuration - hooks supplied once at construction.

The configuration is immutable. To change behaviour, build a new
aggregator with a new config.
"""

from dataclasses import dataclass
from typing import Any, Optional

from herald_protocols import (
    AfterHandleHook,
    BeforeHandleHook,
    HandlerErrorHook,
    Marshaler,
    ZeroListenersHook,
)

from herald_aggregator.marshalers import inline
from herald_aggregator.settings import AggregatorSettings, get_settings


def _ignore_message(message: Any) -> None:
    return None


def _ignore_handler_error(message: Any, listener: Any, error: Exception) -> None:
    return None


@dataclass(frozen=True)
class AggregatorConfig:
    """Hooks and dispatch options for an EventAggregator.

    Attributes:
        on_zero_listeners: Called with the message when no listener handled it
        marshal: Wraps each per-listener action (inline by default)
        on_before_handle: Called with the message before each handler runs
        on_after_handle: Called with the message after each handler that ran
        on_handler_error: Called as (message, listener, error) when a handler
            fails and ``isolate_handler_errors`` is set
        isolate_handler_errors: Keep dispatching after a handler fails
            instead of propagating the exception to the publisher
    """

    on_zero_listeners: ZeroListenersHook = _ignore_message
    marshal: Marshaler = inline
    on_before_handle: BeforeHandleHook = _ignore_message
    on_after_handle: AfterHandleHook = _ignore_message
    on_handler_error: HandlerErrorHook = _ignore_handler_error
    isolate_handler_errors: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AggregatorSettings] = None,
        **overrides: Any,
    ) -> "AggregatorConfig":
        """Build a config from environment settings.

        Args:
            settings: Settings to read (global settings if None)
            **overrides: Field values that take precedence over settings
        """
        settings = settings or get_settings()
        values = {"isolate_handler_errors": settings.isolate_handler_errors}
        values.update(overrides)
        return cls(**values)


__all__ = ["AggregatorConfig"]
