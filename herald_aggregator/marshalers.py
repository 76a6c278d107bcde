"""Marshalers - control where each per-listener action runs.

A marshaler receives a zero-argument action and decides how to run it. The
default runs it inline on the publishing thread. Any callable with the
same shape can be passed to ``AggregatorConfig`` or to a single ``publish``.

Usage:
    from concurrent.futures import ThreadPoolExecutor

    pool = ThreadPoolExecutor(max_workers=4)
    aggregator.publish(OrderCreated(id=1), marshal=executor_marshal(pool))

With a non-inline marshaler, ``publish`` returns once every action has been
handed off, not once every handler has finished.
"""

import asyncio
from concurrent.futures import Executor, Future
from typing import Optional

from herald_protocols import Action, LoggerProtocol, Marshaler
from herald_shared.logging import get_component_logger


def inline(action: Action) -> None:
    """Run the action immediately on the calling thread."""
    action()


def executor_marshal(
    executor: Executor,
    logger: Optional[LoggerProtocol] = None,
) -> Marshaler:
    """Build a marshaler that submits each action to ``executor``.

    Failures inside submitted actions are logged; nothing is re-raised to
    the publisher, which has already returned.
    """
    log = get_component_logger("executor_marshal", logger)

    def _report(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            log.error(
                "marshaled_action_failed",
                error=str(error),
                error_type=type(error).__name__,
            )

    def marshal(action: Action) -> None:
        executor.submit(action).add_done_callback(_report)

    return marshal


def loop_marshal(loop: asyncio.AbstractEventLoop) -> Marshaler:
    """Build a marshaler that schedules each action on an asyncio loop.

    Safe to call from any thread. Exceptions go to the loop's exception
    handler.
    """

    def marshal(action: Action) -> None:
        loop.call_soon_threadsafe(action)

    return marshal


__all__ = ["executor_marshal", "inline", "loop_marshal"]
