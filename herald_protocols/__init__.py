"""Herald Protocols Package - Core type contracts for all layers.

This package provides the structural interfaces that form the contract
between the event aggregator and the code that uses it.

Layering:
    - herald_protocols sits at L0 (no dependencies on other Herald packages)
    - Protocols define interfaces; implementations live in herald_aggregator

Package Structure:
    - protocols.py: LoggerProtocol and the publisher/subscription protocols
    - types.py: Hook and marshaler type aliases
"""

from herald_protocols.protocols import (
    EventAggregatorProtocol,
    EventPublisherProtocol,
    EventSubscriptionManagerProtocol,
    LoggerProtocol,
)
from herald_protocols.types import (
    Action,
    AfterHandleHook,
    BeforeHandleHook,
    HandlerErrorHook,
    Marshaler,
    ZeroListenersHook,
)

__all__ = [
    # Protocols
    "EventAggregatorProtocol",
    "EventPublisherProtocol",
    "EventSubscriptionManagerProtocol",
    "LoggerProtocol",
    # Types
    "Action",
    "AfterHandleHook",
    "BeforeHandleHook",
    "HandlerErrorHook",
    "Marshaler",
    "ZeroListenersHook",
]
