"""Protocol definitions - interfaces for dependency injection.

These are typing.Protocol classes for static type checking. The concrete
EventAggregator in herald_aggregator satisfies all three aggregator
protocols; callers that only publish (or only manage subscriptions)
should depend on the narrower protocol.
"""

from typing import Any, Optional, Protocol, Type, TypeVar, runtime_checkable

from herald_protocols.types import Marshaler

M = TypeVar("M")


# =============================================================================
# LOGGING
# =============================================================================

@runtime_checkable
class LoggerProtocol(Protocol):
    """Structured logging interface."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def bind(self, **kwargs: Any) -> "LoggerProtocol": ...


# =============================================================================
# EVENT AGGREGATION
# =============================================================================

@runtime_checkable
class EventSubscriptionManagerProtocol(Protocol):
    """Adds and removes listener objects.

    Both operations return the manager so calls can be chained:

        aggregator.add_listener(a).add_listener(b)
    """

    def add_listener(self, listener: Any) -> "EventSubscriptionManagerProtocol": ...
    def remove_listener(self, listener: Any) -> "EventSubscriptionManagerProtocol": ...


@runtime_checkable
class EventPublisherProtocol(Protocol):
    """Publishes messages to every listener declaring their exact type."""

    def publish(self, message: Any, marshal: Optional[Marshaler] = None) -> None: ...

    def publish_default(
        self,
        message_type: Type[M],
        marshal: Optional[Marshaler] = None,
    ) -> None: ...


@runtime_checkable
class EventAggregatorProtocol(
    EventPublisherProtocol,
    EventSubscriptionManagerProtocol,
    Protocol,
):
    """Publisher and subscription manager in one."""


__all__ = [
    "EventAggregatorProtocol",
    "EventPublisherProtocol",
    "EventSubscriptionManagerProtocol",
    "LoggerProtocol",
]
