"""Listener registry - thread-safe bookkeeping of listener entries.

All mutation and snapshot creation happen under a single lock. The lock is
never held while a handler runs: dispatch iterates over a snapshot, so
handlers may add or remove listeners (or publish again) without corrupting
iteration or deadlocking.

Entries are keyed by ``id()`` of the listener at registration time. An
``id()`` can be reused after the original object is collected, so every
lookup also checks that the stored entry still refers to the very same
object.
"""

import threading
from typing import Any, Dict, List, Optional

from herald_protocols import LoggerProtocol
from herald_shared.logging import get_component_logger

from herald_aggregator.listener import ListenerEntry


class ListenerRegistry:
    """Insertion-ordered set of listener entries, unique by identity.

    Usage:
        registry = ListenerRegistry(logger)

        registry.add(listener)      # False if already registered
        for entry in registry.snapshot():
            ...
        registry.remove(listener)   # False if absent
    """

    def __init__(self, logger: Optional[LoggerProtocol] = None) -> None:
        self._logger = get_component_logger("listener_registry", logger)
        self._entries: Dict[int, ListenerEntry] = {}
        self._lock = threading.RLock()

    def add(self, listener: Any) -> bool:
        """Register a listener.

        Returns:
            True if added, False if this instance was already registered

        Raises:
            TypeError: If the listener does not support weak references
        """
        key = id(listener)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None and existing.matches(listener):
                self._logger.debug(
                    "listener_already_registered",
                    listener_type=type(listener).__name__,
                )
                return False

            entry = ListenerEntry(listener, self.purge)
            if existing is not None:
                # Stale entry whose id was reused by a new object
                del self._entries[key]
            self._entries[key] = entry

        self._logger.debug(
            "listener_added",
            listener_type=entry.listener_type.__name__,
            message_types=sorted(t.__name__ for t in entry.message_types),
        )
        return True

    def remove(self, listener: Any) -> bool:
        """Unregister a listener.

        Returns:
            True if removed, False if it was not registered
        """
        key = id(listener)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.matches(listener):
                return False
            del self._entries[key]

        self._logger.debug(
            "listener_removed",
            listener_type=entry.listener_type.__name__,
        )
        return True

    def purge(self, entry: ListenerEntry) -> None:
        """Drop an entry whose listener has been collected."""
        with self._lock:
            if self._entries.get(entry.identity) is not entry:
                return
            del self._entries[entry.identity]

        self._logger.debug(
            "listener_purged",
            listener_type=entry.listener_type.__name__,
        )

    def snapshot(self) -> List[ListenerEntry]:
        """Point-in-time copy of the live entries, in registration order.

        Dead entries found while copying are dropped from the registry.
        """
        with self._lock:
            live: List[ListenerEntry] = []
            dead: List[ListenerEntry] = []
            for entry in self._entries.values():
                (live if entry.is_alive() else dead).append(entry)
            for entry in dead:
                del self._entries[entry.identity]

        for entry in dead:
            self._logger.debug(
                "listener_purged",
                listener_type=entry.listener_type.__name__,
            )
        return live

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._logger.debug("listener_registry_cleared")

    def __len__(self) -> int:
        """Number of registered listeners that are still alive."""
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.is_alive())

    def __contains__(self, listener: Any) -> bool:
        with self._lock:
            entry = self._entries.get(id(listener))
            return entry is not None and entry.matches(listener)


__all__ = ["ListenerRegistry"]
