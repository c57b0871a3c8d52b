from __future__ import annotations

import threading
from contextlib import AbstractContextManager, nullcontext
from enum import Enum
from typing import Literal

from scopewire.exceptions import InvalidRegistrationError


class LockMode(Enum):
    """Select locking behavior for container registration and resolution.

    The default is ``NONE``: containers assume cooperative, single-threaded use
    and touch their bindings, cache and resolution stack without locking.
    Choose ``THREAD`` when one container is shared between threads.
    """

    THREAD = "thread"
    """Guard each container with a re-entrant ``threading.RLock``."""

    NONE = "none"
    """Disable locking."""


LockModeLike = LockMode | Literal["thread", "none"]


def normalize_lock_mode(lock_mode: LockModeLike) -> LockMode:
    if isinstance(lock_mode, LockMode):
        return lock_mode
    try:
        return LockMode(lock_mode)
    except ValueError:
        msg = f"Unsupported lock_mode {lock_mode!r}; expected one of 'thread', 'none'."
        raise InvalidRegistrationError(msg) from None


def build_lock(lock_mode: LockMode) -> AbstractContextManager[object]:
    # Re-entrant: factories call back into the container that is resolving them.
    if lock_mode is LockMode.THREAD:
        return threading.RLock()
    return nullcontext()
