"""Event Aggregator - the publish/subscribe facade.

Publishers and listeners never reference each other. Listeners declare the
message types they handle (see herald_aggregator.capability); publishers hand
a message to the aggregator, which delivers it to every live listener that
declares the message's exact type.

Dispatch:
    publish(message)
        -> registry.snapshot()
        -> for each entry: marshal(action)
             action: handles(type)? -> on_before_handle -> try_invoke
                     -> on_after_handle (if invoked)
        -> on_zero_listeners(message) if nothing was invoked

Thread Safety:
    The registry lock covers add/remove/snapshot only. Handlers run with no
    lock held, so a handler may publish, add or remove listeners. A listener
    added while a publish is in flight is not visited by that publish.

Layering: ONLY imports from herald_protocols and herald_shared.
"""

from typing import Any, List, Optional, Type, TypeVar

from herald_protocols import EventAggregatorProtocol, LoggerProtocol, Marshaler
from herald_shared.logging import get_component_logger

from herald_aggregator.config import AggregatorConfig
from herald_aggregator.listener import ListenerEntry
from herald_aggregator.registry import ListenerRegistry
from herald_aggregator.settings import AggregatorSettings

M = TypeVar("M")


class EventAggregator(EventAggregatorProtocol):
    """In-process message broker over weakly held listeners.

    Usage:
        aggregator = EventAggregator(
            AggregatorConfig(on_zero_listeners=report_unhandled),
        )

        audit = OrderAudit()
        aggregator.add_listener(audit).add_listener(dashboard)

        aggregator.publish(OrderCreated(id=1))
        aggregator.publish_default(CacheFlushed)

        aggregator.remove_listener(audit)

    Listeners are held weakly: dropping the last application reference to a
    listener unsubscribes it without calling remove_listener.
    """

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> None:
        """Initialize event aggregator.

        Args:
            config: Hooks and dispatch options (inert defaults if None)
            logger: Logger instance (context logger if None)
        """
        self._config = config or AggregatorConfig()
        self._logger = get_component_logger("event_aggregator", logger)
        self._registry = ListenerRegistry(logger=logger)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AggregatorSettings] = None,
        logger: Optional[LoggerProtocol] = None,
        **overrides: Any,
    ) -> "EventAggregator":
        """Create an aggregator configured from environment settings."""
        return cls(AggregatorConfig.from_settings(settings, **overrides), logger=logger)

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    # =========================================================================
    # PUBLISHING
    # =========================================================================

    def publish(self, message: Any, marshal: Optional[Marshaler] = None) -> None:
        """Deliver ``message`` to every live listener of its exact type.

        Args:
            message: The message instance
            marshal: Overrides the configured marshaler for this call only

        Raises:
            Exception: Whatever a handler raises, unless the config isolates
                handler errors. Delivery stops at the failing listener.
        """
        message_type = type(message)
        marshal = marshal or self._config.marshal
        invoked: List[ListenerEntry] = []

        for entry in self._registry.snapshot():
            marshal(self._make_action(entry, message_type, message, invoked))

        if not invoked:
            self._logger.debug(
                "message_unhandled",
                message_type=message_type.__name__,
            )
            self._config.on_zero_listeners(message)
            return

        self._logger.debug(
            "message_published",
            message_type=message_type.__name__,
            handler_count=len(invoked),
        )

    def publish_default(
        self,
        message_type: Type[M],
        marshal: Optional[Marshaler] = None,
    ) -> None:
        """Publish a new ``message_type()`` instance.

        Raises:
            TypeError: If ``message_type`` cannot be built without arguments
        """
        self.publish(message_type(), marshal)

    def _make_action(
        self,
        entry: ListenerEntry,
        message_type: Type[Any],
        message: Any,
        invoked: List[ListenerEntry],
    ):
        config = self._config

        def action() -> None:
            if not entry.handles(message_type):
                return
            config.on_before_handle(message)
            if self._invoke(entry, message_type, message):
                config.on_after_handle(message)
                invoked.append(entry)

        return action

    def _invoke(self, entry: ListenerEntry, message_type: Type[Any], message: Any) -> bool:
        if not self._config.isolate_handler_errors:
            return entry.try_invoke(message_type, message)

        try:
            return entry.try_invoke(message_type, message)
        except Exception as e:
            self._logger.error(
                "listener_handler_error",
                message_type=message_type.__name__,
                listener_type=entry.listener_type.__name__,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._config.on_handler_error(message, entry.listener, e)
            return False

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def add_listener(self, listener: Any) -> "EventAggregator":
        """Register a listener. Registering the same instance again is a no-op.

        Raises:
            TypeError: If the listener does not support weak references
        """
        self._registry.add(listener)
        return self

    def remove_listener(self, listener: Any) -> "EventAggregator":
        """Unregister a listener. Unknown listeners are ignored."""
        self._registry.remove(listener)
        return self

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def has_listener(self, listener: Any) -> bool:
        return listener in self._registry

    def listener_count(self) -> int:
        """Number of registered listeners still alive."""
        return len(self._registry)

    def clear(self) -> None:
        """Remove every listener."""
        self._registry.clear()


__all__ = ["EventAggregator"]
