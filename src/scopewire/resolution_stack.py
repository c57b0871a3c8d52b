from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from scopewire.exceptions import CyclicDependencyError

logger = logging.getLogger(__name__)

# (owner task id, in-flight (container id, key) pairs). Spans every container
# touched by one synchronous resolution, including ``invoke`` scopes.
_resolution_path: ContextVar[tuple[int | None, tuple[tuple[int, str], ...]] | None] = ContextVar(
    "scopewire_resolution_path",
    default=None,
)


def _get_context_id() -> int | None:
    """Get an identifier for the current execution context.

    Returns the id of the current async task if running in an async context,
    or None if running in a sync context.
    """
    try:
        task = asyncio.current_task()
        return id(task) if task is not None else None
    except RuntimeError:
        return None


def _current_path() -> tuple[tuple[int, str], ...]:
    stored = _resolution_path.get()
    if stored is None:
        return ()
    owner_task_id, path = stored
    # A task spawned by a factory inherits a copy of the context; the
    # resolution it was spawned from is not in flight for it.
    if owner_task_id != _get_context_id():
        return ()
    return path


@contextmanager
def resolving(owner_id: int, key: str) -> Iterator[None]:
    """Mark ``key`` of the container ``owner_id`` as in flight for the enclosed block.

    Raises:
        CyclicDependencyError: If the same key of the same container is
            already in flight. ``path`` lists every in-flight key in
            traversal order, followed by ``key``.

    """
    path = _current_path()
    if (owner_id, key) in path:
        keys = [*(in_flight for _, in_flight in path), key]
        logger.debug("Cyclic dependency on '%s': %s", key, " -> ".join(keys))
        raise CyclicDependencyError(key, keys)

    token = _resolution_path.set((_get_context_id(), (*path, (owner_id, key))))
    try:
        yield
    finally:
        _resolution_path.reset(token)
