"""Callable type aliases shared by the aggregator and its configuration."""

from typing import Any, Callable

# A zero-argument unit of work handed to a marshaler
Action = Callable[[], None]

# Wraps each per-listener action; may run it inline or hand it elsewhere
Marshaler = Callable[[Action], None]

ZeroListenersHook = Callable[[Any], None]
BeforeHandleHook = Callable[[Any], None]
AfterHandleHook = Callable[[Any], None]

# (message, listener, error)
HandlerErrorHook = Callable[[Any, Any, Exception], None]

__all__ = [
    "Action",
    "AfterHandleHook",
    "BeforeHandleHook",
    "HandlerErrorHook",
    "Marshaler",
    "ZeroListenersHook",
]
