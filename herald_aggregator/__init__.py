"""Herald event aggregator.

In-process publish/subscribe over weakly held listener objects:
- Capability discovery (Handles[T] bases and @handles methods)
- Exact-type routing
- Thread-safe registry with snapshot dispatch
- Pluggable marshaling of handler invocation

Exports:
    EventAggregator: The publish/subscribe facade
    AggregatorConfig: Immutable hooks and dispatch options
    AggregatorSettings: Environment-driven settings (HERALD_*)
    Handles, Listener, handles: Capability declaration
    inline, executor_marshal, loop_marshal: Marshalers
"""

from herald_aggregator.aggregator import EventAggregator
from herald_aggregator.capability import (
    CapabilityDescriptor,
    Handles,
    Listener,
    describe,
    handles,
)
from herald_aggregator.config import AggregatorConfig
from herald_aggregator.listener import ListenerEntry
from herald_aggregator.marshalers import executor_marshal, inline, loop_marshal
from herald_aggregator.registry import ListenerRegistry
from herald_aggregator.settings import (
    AggregatorSettings,
    get_settings,
    reset_settings,
    set_settings,
)

__all__ = [
    "AggregatorConfig",
    "AggregatorSettings",
    "CapabilityDescriptor",
    "EventAggregator",
    "Handles",
    "Listener",
    "ListenerEntry",
    "ListenerRegistry",
    "describe",
    "executor_marshal",
    "get_settings",
    "handles",
    "inline",
    "loop_marshal",
    "reset_settings",
    "set_settings",
]
