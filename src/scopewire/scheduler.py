from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from scopewire.exceptions import SchedulerUnavailableError

logger = logging.getLogger(__name__)


@runtime_checkable
class Scheduler(Protocol):
    """Run callbacks after the current synchronous work drains.

    Callbacks scheduled within one synchronous turn must run in the order they
    were scheduled.
    """

    def call_soon(self, callback: Callable[[], object]) -> None:
        """Queue ``callback`` for a later turn."""


class AsyncioScheduler:
    """Defer callbacks to the next iteration of the running asyncio loop.

    This is the default scheduler of a root ``Container``. The loop is looked
    up on every call, so one scheduler can serve containers created before the
    loop started.
    """

    def call_soon(self, callback: Callable[[], object]) -> None:
        """Queue ``callback`` on the running event loop.

        Raises:
            SchedulerUnavailableError: If no event loop is running in the
                current thread.

        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            msg = (
                "No running event loop to defer the call to. Call from a coroutine, "
                "or configure the container with scheduler=ManualScheduler()."
            )
            raise SchedulerUnavailableError(msg) from None
        loop.call_soon(callback)


class ManualScheduler:
    """Queue callbacks in memory until ``run_pending`` drains them.

    Intended for synchronous programs and tests that need eager providers
    without an event loop.

    Examples:
        .. code-block:: python

            scheduler = ManualScheduler()
            container = Container(scheduler=scheduler)
            container.eager_provider("warmup", lambda deps: warm(deps["db"]))
            container.constant("db", db)
            scheduler.run_pending()

    """

    def __init__(self) -> None:
        self._queue: deque[Callable[[], object]] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def call_soon(self, callback: Callable[[], object]) -> None:
        self._queue.append(callback)

    def run_pending(self) -> int:
        """Run queued callbacks in FIFO order until the queue is empty.

        Callbacks queued while draining run in the same call, after the ones
        already waiting. An exception from a callback propagates and leaves the
        remaining callbacks queued.

        Returns:
            Number of callbacks that ran.

        """
        ran = 0
        while self._queue:
            callback = self._queue.popleft()
            callback()
            ran += 1
        if ran:
            logger.debug("Ran %d deferred callback(s)", ran)
        return ran
