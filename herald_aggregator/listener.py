"""Listener entry - a weakly held listener plus its capabilities.

The registry never owns listeners. Once the last strong reference held by
application code goes away, the entry reports itself dead and asks the
registry to drop it.
"""

import weakref
from typing import Any, Callable, FrozenSet, Optional, Type

from herald_aggregator.capability import CapabilityDescriptor


class ListenerEntry:
    """Non-owning binding between a listener instance and its capabilities."""

    __slots__ = ("_ref", "_descriptor", "_on_remove", "identity", "listener_type")

    def __init__(
        self,
        listener: Any,
        on_remove: Callable[["ListenerEntry"], None],
    ) -> None:
        """Initialize entry.

        Args:
            listener: The listener instance (held weakly)
            on_remove: Called with this entry when the listener is found dead

        Raises:
            TypeError: If the listener does not support weak references
        """
        try:
            self._ref = weakref.ref(listener)
        except TypeError:
            raise TypeError(
                f"cannot register {type(listener).__name__!r} as a listener: "
                "instances must support weak references"
            ) from None

        self._descriptor = CapabilityDescriptor.build(listener)
        self._on_remove = on_remove
        self.identity = id(listener)
        self.listener_type: Type[Any] = type(listener)

    @property
    def listener(self) -> Optional[Any]:
        """The listener, or None once it has been collected."""
        return self._ref()

    @property
    def message_types(self) -> FrozenSet[type]:
        return self._descriptor.message_types

    def is_alive(self) -> bool:
        return self._ref() is not None

    def matches(self, listener: Any) -> bool:
        """True if this entry holds exactly ``listener`` (identity, not equality)."""
        return self._ref() is listener

    def handles(self, message_type: Type[Any]) -> bool:
        return self._descriptor.handles(message_type)

    def try_invoke(self, message_type: Type[Any], message: Any) -> bool:
        """Deliver ``message`` if the listener is alive and handles the type.

        A dead listener triggers the removal callback and is not invoked.

        Returns:
            True if the handler ran
        """
        target = self._ref()
        if target is None:
            self._on_remove(self)
            return False
        return self._descriptor.invoke(target, message_type, message)

    def __repr__(self) -> str:
        state = "alive" if self.is_alive() else "dead"
        return f"<ListenerEntry {self.listener_type.__name__} {state}>"


__all__ = ["ListenerEntry"]
