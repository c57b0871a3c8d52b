from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from scopewire.container import Container
from scopewire.dependencies import Dependencies
from scopewire.exceptions import SchedulerUnavailableError
from scopewire.lock_mode import LockModeLike
from scopewire.scheduler import Scheduler

R = TypeVar("R")


def run(
    fn: Callable[[Dependencies], R],
    *,
    lock_mode: LockModeLike | None = None,
    scheduler: Scheduler | None = None,
) -> R:
    """Build a root container and invoke ``fn`` in an ephemeral scope of it.

    Equivalent to ``Container(...).invoke(fn)``; ``fn`` runs synchronously and
    its return value is passed through.

    Examples:
        .. code-block:: python

            def main(deps: Dependencies) -> None:
                deps.scope.constant("data", {"users": {}})
                deps.scope.invoke(add_user)(user)

            run(main)

    """
    return Container(lock_mode=lock_mode, scheduler=scheduler).invoke(fn)


def run_async(
    fn: Callable[[Dependencies], R | Awaitable[R]],
    *,
    lock_mode: LockModeLike | None = None,
    scheduler: Scheduler | None = None,
) -> asyncio.Task[R]:
    """Invoke ``fn`` like ``run``, but on a later iteration of the running loop.

    ``fn`` does not run before the caller yields to the event loop. Calls
    scheduled in the same turn run in scheduling order. The returned task
    resolves with ``fn``'s result, awaiting it first when it is awaitable, and
    fails with whatever ``fn`` or its awaitable raises.

    Raises:
        SchedulerUnavailableError: If called without a running event loop.

    Examples:
        .. code-block:: python

            async def main(deps: Dependencies) -> int:
                deps.scope.provider("client", lambda deps: HttpClient())
                return await deps["client"].ping()

            status = await run_async(main)

    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        msg = "run_async() requires a running event loop; use run() in synchronous code."
        raise SchedulerUnavailableError(msg) from None

    container = Container(lock_mode=lock_mode, scheduler=scheduler)
    return loop.create_task(_invoke_later(container, fn))


async def _invoke_later(container: Container, fn: Callable[[Dependencies], Any]) -> Any:
    result = container.invoke(fn)
    if inspect.isawaitable(result):
        return await result
    return result
