"""Shared pytest fixtures for scopewire tests."""

import pytest

from scopewire.container import Container
from scopewire.lock_mode import LockMode
from scopewire.scheduler import ManualScheduler


@pytest.fixture()
def container() -> Container:
    """Root container with default configuration."""
    return Container()


@pytest.fixture()
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def manual_container(manual_scheduler: ManualScheduler) -> Container:
    """Root container whose deferred calls run on ``manual_scheduler.run_pending()``."""
    return Container(scheduler=manual_scheduler)


@pytest.fixture()
def thread_safe_container() -> Container:
    """Root container guarded by a re-entrant thread lock."""
    return Container(lock_mode=LockMode.THREAD)
