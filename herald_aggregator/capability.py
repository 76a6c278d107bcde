"""Capability discovery - which message types a listener handles.

A listener declares capabilities in one of two ways:

    class OrderAudit(Handles[OrderCreated]):
        def handle(self, message: OrderCreated) -> None:
            ...

    class Dashboard:
        @handles(OrderCreated)
        def on_order(self, message: OrderCreated) -> None:
            ...

        @handles(OrderShipped, OrderCancelled)
        def on_order_change(self, message) -> None:
            ...

Both forms can be mixed on one class. Declarations are read from the class
once and cached; each registered instance reuses the cached map.

Routing is by exact type: a capability for ``Base`` never receives a
``Derived`` message.
"""

import functools
import inspect
import threading
import weakref
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Generic,
    List,
    Mapping,
    Tuple,
    Type,
    TypeVar,
    get_args,
    get_origin,
)

M = TypeVar("M")

# Unbound handler: (listener, message) -> Any
Invoker = Callable[[Any, Any], Any]

_HANDLES_ATTR = "__herald_handles__"
_GENERIC_HANDLER_NAME = "handle"


class Listener:
    """Marker base for objects that receive messages.

    Carries no methods. Subclassing it is optional; it only makes intent
    explicit in class hierarchies.
    """


class Handles(Listener, Generic[M]):
    """Declares the ability to handle messages of type ``M``.

    Subclasses implement ``handle``. A class may inherit ``Handles[...]``
    through several bases to handle several types with one method.
    """

    def handle(self, message: M) -> None:
        raise NotImplementedError


def handles(*message_types: type) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a method as the handler for one or more message types.

    Raises:
        TypeError: If no types are given or any argument is not a class
    """
    if not message_types:
        raise TypeError("handles() requires at least one message type")
    for message_type in message_types:
        if not isinstance(message_type, type):
            raise TypeError(f"handles() expects classes, got {message_type!r}")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        # One wrapper per decoration; func itself is never modified
        @functools.wraps(func)
        def handler(*args: Any, **kwargs: Any) -> Any:
            return func(*args, **kwargs)

        declared: Tuple[type, ...] = getattr(func, _HANDLES_ATTR, ())
        setattr(handler, _HANDLES_ATTR, declared + message_types)
        return handler

    return decorator


# Per-class capability maps (class -> message type -> handler name)
_cache: "weakref.WeakKeyDictionary[type, Mapping[type, Invoker]]" = weakref.WeakKeyDictionary()
_cache_lock = threading.Lock()


def _generic_message_types(klass: type, bound: Dict[Any, Any]) -> List[type]:
    """Message types declared through Handles[...] on klass's parameterized bases.

    Type variables are substituted as the walk descends, so
    ``class OrderRecorder(Recorder[OrderCreated])`` with
    ``class Recorder(Handles[T])`` resolves to OrderCreated. Plain bases are
    skipped; the MRO walk reaches them on its own.
    """
    found: List[type] = []

    for base in vars(klass).get("__orig_bases__", ()):
        origin = get_origin(base)
        if origin is None or origin is Generic or not isinstance(origin, type):
            continue
        args = tuple(
            bound.get(arg, arg) if isinstance(arg, TypeVar) else arg
            for arg in get_args(base)
        )

        if origin is Handles:
            (message_type,) = args
            if isinstance(message_type, type):
                found.append(message_type)
            continue

        parameters = getattr(origin, "__parameters__", ())
        found.extend(_generic_message_types(origin, dict(zip(parameters, args))))

    return found


def _declared_handlers(cls: type) -> Dict[type, str]:
    """Collect message type -> method name, most-derived declaration first."""
    names: Dict[type, str] = {}

    for klass in cls.__mro__:
        # Explicit decorators win over a generic base on the same class
        for name, attr in vars(klass).items():
            func = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
            for message_type in getattr(func, _HANDLES_ATTR, ()):
                names.setdefault(message_type, name)

        for message_type in _generic_message_types(klass, {}):
            names.setdefault(message_type, _GENERIC_HANDLER_NAME)

    return names


def _resolve_invoker(cls: type, name: str) -> Invoker:
    handler = inspect.getattr_static(cls, name)
    if isinstance(handler, (staticmethod, classmethod)) or not callable(handler):
        raise TypeError(
            f"{cls.__name__}.{name} must be an instance method to handle messages"
        )
    return handler


def describe(listener_type: type) -> Mapping[type, Invoker]:
    """Return the read-only capability map for a listener class."""
    with _cache_lock:
        cached = _cache.get(listener_type)
        if cached is not None:
            return cached

        invokers = {
            message_type: _resolve_invoker(listener_type, name)
            for message_type, name in _declared_handlers(listener_type).items()
        }
        capability_map = MappingProxyType(invokers)
        _cache[listener_type] = capability_map
        return capability_map


class CapabilityDescriptor:
    """The message types one listener handles, with an invoker per type."""

    __slots__ = ("_invokers",)

    def __init__(self, invokers: Mapping[type, Invoker]) -> None:
        self._invokers = invokers

    @classmethod
    def build(cls, listener: Any) -> "CapabilityDescriptor":
        """Build the descriptor for a listener instance."""
        return cls(describe(type(listener)))

    @property
    def message_types(self) -> FrozenSet[type]:
        return frozenset(self._invokers)

    def handles(self, message_type: Type[Any]) -> bool:
        return message_type in self._invokers

    def invoke(self, target: Any, message_type: Type[Any], message: Any) -> bool:
        """Call the handler for ``message_type`` on ``target``.

        Returns False when ``message_type`` is not handled. Exceptions raised
        by the handler propagate.
        """
        invoker = self._invokers.get(message_type)
        if invoker is None:
            return False
        invoker(target, message)
        return True

    def __len__(self) -> int:
        return len(self._invokers)

    def __repr__(self) -> str:
        names = sorted(t.__name__ for t in self._invokers)
        return f"CapabilityDescriptor({', '.join(names)})"


__all__ = [
    "CapabilityDescriptor",
    "Handles",
    "Invoker",
    "Listener",
    "describe",
    "handles",
]
