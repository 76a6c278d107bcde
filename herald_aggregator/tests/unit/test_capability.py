"""Unit tests for capability discovery.

Covers both declaration forms (Handles[T] bases and @handles methods),
exact-type matching, inheritance and per-class caching.
"""

import pytest
from dataclasses import dataclass

from herald_aggregator.capability import (
    CapabilityDescriptor,
    Handles,
    Listener,
    describe,
    handles,
)


@dataclass
class OrderCreated:
    id: int


@dataclass
class OrderShipped:
    id: int


class OrderCancelled:
    pass


class PriorityOrderCreated(OrderCreated):
    pass


class CreatedAudit(Handles[OrderCreated]):
    def __init__(self):
        self.received = []

    def handle(self, message):
        self.received.append(message)


class Dashboard:
    def __init__(self):
        self.created = []
        self.changed = []

    @handles(OrderCreated)
    def on_created(self, message):
        self.created.append(message)

    @handles(OrderShipped, OrderCancelled)
    def on_changed(self, message):
        self.changed.append(message)


class NamedButUndeclared:
    """Has a handle method but declares no capability."""

    def handle(self, message):
        raise AssertionError("should never be called")


# =============================================================================
# DECLARATION
# =============================================================================


def test_generic_base_declares_message_type():
    """Test Handles[T] maps T to handle()."""
    capability_map = describe(CreatedAudit)

    assert set(capability_map) == {OrderCreated}
    assert capability_map[OrderCreated] is CreatedAudit.handle


def test_decorator_declares_multiple_types():
    """Test @handles maps every listed type to the decorated method."""
    capability_map = describe(Dashboard)

    assert set(capability_map) == {OrderCreated, OrderShipped, OrderCancelled}
    assert capability_map[OrderShipped] is Dashboard.on_changed
    assert capability_map[OrderCancelled] is Dashboard.on_changed


def test_method_name_alone_declares_nothing():
    """Test a bare handle() method is not a capability."""
    assert len(describe(NamedButUndeclared)) == 0


def test_generic_and_decorator_forms_combine():
    """Test a class can use both declaration forms."""

    class Combined(Handles[OrderCreated]):
        def handle(self, message):
            pass

        @handles(OrderShipped)
        def on_shipped(self, message):
            pass

    assert set(describe(Combined)) == {OrderCreated, OrderShipped}


def test_multiple_generic_bases_share_handle():
    """Test Handles[...] inherited through several bases."""

    class CreatedBase(Handles[OrderCreated]):
        pass

    class ShippedBase(Handles[OrderShipped]):
        pass

    class Both(CreatedBase, ShippedBase):
        def handle(self, message):
            pass

    capability_map = describe(Both)

    assert set(capability_map) == {OrderCreated, OrderShipped}
    assert capability_map[OrderCreated] is Both.handle
    assert capability_map[OrderShipped] is Both.handle


def test_unbound_type_variable_is_ignored():
    """Test a generic intermediate class does not declare a type."""
    from typing import TypeVar

    T = TypeVar("T")

    class Forwarder(Handles[T]):
        def handle(self, message):
            pass

    assert len(describe(Forwarder)) == 0


def test_specialized_generic_intermediate_declares_type():
    """Test Recorder[OrderCreated] over Recorder(Handles[T]) handles OrderCreated."""
    from typing import TypeVar

    T = TypeVar("T")

    class Recorder(Handles[T]):
        def __init__(self):
            self.received = []

        def handle(self, message):
            self.received.append(message)

    class OrderRecorder(Recorder[OrderCreated]):
        pass

    capability_map = describe(OrderRecorder)

    assert set(capability_map) == {OrderCreated}
    assert capability_map[OrderCreated] is Recorder.handle

    recorder = OrderRecorder()
    descriptor = CapabilityDescriptor.build(recorder)
    assert descriptor.invoke(recorder, OrderCreated, OrderCreated(id=4)) is True
    assert recorder.received == [OrderCreated(id=4)]


def test_type_variables_resolve_through_several_levels():
    """Test substitution through renamed type variables and mixins."""
    from typing import Generic, TypeVar

    T = TypeVar("T")
    U = TypeVar("U")

    class Mixin:
        pass

    class Recorder(Mixin, Handles[T]):
        def handle(self, message):
            pass

    class Relay(Recorder[U], Generic[U]):
        pass

    class ShippedRelay(Relay[OrderShipped]):
        pass

    assert set(describe(ShippedRelay)) == {OrderShipped}
    assert len(describe(Relay)) == 0


def test_listener_marker_declares_nothing():
    """Test the marker base alone has no capabilities."""

    class Plain(Listener):
        pass

    assert len(describe(Plain)) == 0


# =============================================================================
# INHERITANCE
# =============================================================================


def test_subclass_inherits_decorated_handlers():
    """Test capabilities declared on a base class are inherited."""

    class ExtendedDashboard(Dashboard):
        pass

    assert set(describe(ExtendedDashboard)) == {OrderCreated, OrderShipped, OrderCancelled}


def test_override_without_decorator_replaces_handler():
    """Test an override is used even when it is not re-decorated."""

    class QuietDashboard(Dashboard):
        def on_created(self, message):
            pass

    assert describe(QuietDashboard)[OrderCreated] is QuietDashboard.on_created


def test_most_derived_declaration_wins():
    """Test a subclass can move a type to a different method."""

    class Rerouted(Dashboard):
        @handles(OrderCreated)
        def on_created_again(self, message):
            pass

    assert describe(Rerouted)[OrderCreated] is Rerouted.on_created_again


def test_decorator_wins_over_generic_on_same_class():
    """Test an explicit @handles takes precedence over Handles[T]."""

    class Explicit(Handles[OrderCreated]):
        def handle(self, message):
            pass

        @handles(OrderCreated)
        def on_created(self, message):
            pass

    assert describe(Explicit)[OrderCreated] is Explicit.on_created


# =============================================================================
# VALIDATION
# =============================================================================


def test_handles_requires_a_type():
    """Test @handles() with no arguments is rejected."""
    with pytest.raises(TypeError):
        handles()


def test_handles_rejects_non_class():
    """Test @handles rejects instances and strings."""
    with pytest.raises(TypeError):
        handles("OrderCreated")


def test_shared_function_keeps_declarations_per_class():
    """Test decorating one function for two classes keeps them separate."""

    def on_message(self, message):
        pass

    class CreatedOnly:
        on_created = handles(OrderCreated)(on_message)

    class ShippedOnly:
        on_shipped = handles(OrderShipped)(on_message)

    assert set(describe(CreatedOnly)) == {OrderCreated}
    assert set(describe(ShippedOnly)) == {OrderShipped}
    assert not hasattr(on_message, "__herald_handles__")


def test_stacked_decorators_accumulate():
    """Test several @handles on one method declare every type."""

    class Stacked:
        def __init__(self):
            self.received = []

        @handles(OrderCreated)
        @handles(OrderShipped)
        def on_order(self, message):
            self.received.append(message)

    stacked = Stacked()
    descriptor = CapabilityDescriptor.build(stacked)

    assert descriptor.message_types == frozenset({OrderCreated, OrderShipped})
    assert descriptor.invoke(stacked, OrderShipped, OrderShipped(id=2)) is True
    assert stacked.received == [OrderShipped(id=2)]
    assert Stacked.on_order.__name__ == "on_order"


def test_static_handler_is_rejected():
    """Test a static method cannot be a handler."""

    class Static:
        @staticmethod
        @handles(OrderCreated)
        def on_created(message):
            pass

    with pytest.raises(TypeError, match="instance method"):
        describe(Static)


def test_describe_is_cached_per_class():
    """Test the class map is computed once."""
    assert describe(Dashboard) is describe(Dashboard)


# =============================================================================
# DESCRIPTOR
# =============================================================================


def test_descriptor_handles_exact_type_only():
    """Test no widening from a subclass message to a base capability."""
    descriptor = CapabilityDescriptor.build(CreatedAudit())

    assert descriptor.handles(OrderCreated)
    assert not descriptor.handles(PriorityOrderCreated)
    assert not descriptor.handles(OrderShipped)


def test_descriptor_invoke_calls_handler():
    """Test invoke runs the handler and reports it."""
    audit = CreatedAudit()
    descriptor = CapabilityDescriptor.build(audit)

    invoked = descriptor.invoke(audit, OrderCreated, OrderCreated(id=1))

    assert invoked is True
    assert audit.received == [OrderCreated(id=1)]


def test_descriptor_invoke_unhandled_type():
    """Test invoke returns False for an undeclared type."""
    dashboard = Dashboard()
    descriptor = CapabilityDescriptor.build(dashboard)

    invoked = descriptor.invoke(dashboard, PriorityOrderCreated, PriorityOrderCreated(id=1))

    assert invoked is False
    assert dashboard.created == []


def test_descriptor_invoke_propagates_handler_error():
    """Test handler failures are not caught by the descriptor."""

    class Failing(Handles[OrderCreated]):
        def handle(self, message):
            raise RuntimeError("boom")

    failing = Failing()
    descriptor = CapabilityDescriptor.build(failing)

    with pytest.raises(RuntimeError, match="boom"):
        descriptor.invoke(failing, OrderCreated, OrderCreated(id=1))


def test_descriptor_message_types():
    """Test message_types lists declared types."""
    descriptor = CapabilityDescriptor.build(Dashboard())

    assert descriptor.message_types == frozenset({OrderCreated, OrderShipped, OrderCancelled})
    assert len(descriptor) == 3
