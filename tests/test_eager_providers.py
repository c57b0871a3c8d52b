"""Tests for eager providers and the schedulers they defer to."""

from __future__ import annotations

import asyncio

import pytest

from scopewire import run
from scopewire.container import Container
from scopewire.dependencies import Dependencies
from scopewire.exceptions import DuplicateBindingError, SchedulerUnavailableError
from scopewire.scheduler import AsyncioScheduler, ManualScheduler, Scheduler


class TestEagerProviderManualScheduler:
    def test_stores_a_provider(self, manual_container: Container) -> None:
        """Eager provider is readable like a plain provider."""
        manual_container.eager_provider("foo", lambda _: "bar")

        assert manual_container.get("foo") == "bar"

    def test_runs_without_explicit_access(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Factory runs when the scheduler drains."""
        calls: list[str] = []
        manual_container.eager_provider("eager", lambda _: calls.append("ran"))

        assert calls == []
        assert manual_scheduler.run_pending() == 1
        assert calls == ["ran"]

    def test_sees_constants_registered_later_in_the_same_turn(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Constants bound after the eager provider are visible to it."""
        seen: list[str] = []
        manual_container.eager_provider("eager", lambda deps: seen.append(deps["message"]))
        manual_container.constant("message", "Hello world")

        manual_scheduler.run_pending()

        assert seen == ["Hello world"]

    def test_sees_providers_registered_later_in_the_same_turn(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Providers bound after the eager provider are visible to it."""
        seen: list[str] = []
        manual_container.eager_provider("eager", lambda deps: seen.append(deps["message"]))
        manual_container.provider("message", lambda _: "Hello world")

        manual_scheduler.run_pending()

        assert seen == ["Hello world"]

    def test_forced_access_is_memoized(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Forced access fills the cache like any other read."""
        calls: list[str] = []

        def factory(_: Dependencies) -> object:
            calls.append("ran")
            return object()

        manual_container.eager_provider("eager", factory)
        manual_scheduler.run_pending()

        assert manual_container.get("eager") is manual_container.get("eager")
        assert calls == ["ran"]

    def test_rejects_duplicates_without_scheduling(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Duplicate key queues nothing."""
        manual_container.constant("foo", 1)

        with pytest.raises(DuplicateBindingError):
            manual_container.eager_provider("foo", lambda _: 2)

        assert len(manual_scheduler) == 0

    def test_child_inherits_scheduler(
        self,
        manual_container: Container,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Child eager providers use the parent's scheduler."""
        calls: list[str] = []
        child = manual_container.extend()

        child.eager_provider("eager", lambda _: calls.append("ran"))
        manual_scheduler.run_pending()

        assert calls == ["ran"]
        assert not manual_container.has("eager")


class TestEagerProviderAsyncio:
    @pytest.mark.asyncio
    async def test_runs_on_next_loop_iteration(self, container: Container) -> None:
        """Asyncio scheduler runs the access on the next loop turn."""
        seen: list[str] = []
        container.eager_provider("eager", lambda deps: seen.append(deps["message"]))
        container.constant("message", "Hello world")

        assert seen == []
        await asyncio.sleep(0)

        assert seen == ["Hello world"]

    @pytest.mark.asyncio
    async def test_runs_in_scheduling_order(self, container: Container) -> None:
        """Forced accesses run in registration order."""
        order: list[str] = []
        container.eager_provider("first", lambda _: order.append("first"))
        container.eager_provider("second", lambda _: order.append("second"))

        await asyncio.sleep(0)

        assert order == ["first", "second"]

    def test_without_running_loop_rolls_back(self, container: Container) -> None:
        """Missing loop raises and leaves no binding behind."""
        with pytest.raises(SchedulerUnavailableError, match="ManualScheduler"):
            container.eager_provider("eager", lambda _: None)

        assert not container.has("eager")


class TestManualScheduler:
    def test_runs_callbacks_in_fifo_order(self, manual_scheduler: ManualScheduler) -> None:
        """Queued callbacks run first in, first out."""
        order: list[int] = []
        for index in range(3):
            manual_scheduler.call_soon(lambda index=index: order.append(index))

        assert len(manual_scheduler) == 3
        assert manual_scheduler.run_pending() == 3
        assert order == [0, 1, 2]
        assert len(manual_scheduler) == 0

    def test_callbacks_queued_while_draining_run_last(
        self,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Callbacks queued during a drain run in the same drain."""
        order: list[str] = []

        def first() -> None:
            order.append("first")
            manual_scheduler.call_soon(lambda: order.append("queued by first"))

        manual_scheduler.call_soon(first)
        manual_scheduler.call_soon(lambda: order.append("second"))

        assert manual_scheduler.run_pending() == 3
        assert order == ["first", "second", "queued by first"]

    def test_error_leaves_remaining_callbacks_queued(
        self,
        manual_scheduler: ManualScheduler,
    ) -> None:
        """Failing callback stops the drain and keeps the rest."""
        def failing() -> None:
            raise RuntimeError("boom")

        manual_scheduler.call_soon(failing)
        manual_scheduler.call_soon(lambda: None)

        with pytest.raises(RuntimeError, match="boom"):
            manual_scheduler.run_pending()

        assert len(manual_scheduler) == 1

    def test_schedulers_satisfy_protocol(self, manual_scheduler: ManualScheduler) -> None:
        """Both schedulers implement the Scheduler protocol."""
        assert isinstance(manual_scheduler, Scheduler)
        assert isinstance(AsyncioScheduler(), Scheduler)


class TestEagerProviderInRun:
    def test_manual_scheduler_defers_until_drained(self) -> None:
        """Eager providers registered from a synchronous run() fire on run_pending()."""
        scheduler = ManualScheduler()
        seen: list[str] = []

        def main(deps: Dependencies) -> None:
            deps.scope.eager_provider("warmup", lambda inner: seen.append(inner["cache"]))
            deps.scope.constant("cache", "warm")

        run(main, scheduler=scheduler)

        assert seen == []
        assert scheduler.run_pending() == 1
        assert seen == ["warm"]

    def test_default_scheduler_needs_a_running_loop(self) -> None:
        """Synchronous run() without a ManualScheduler cannot defer eager providers."""

        def main(deps: Dependencies) -> None:
            deps.scope.eager_provider("warmup", lambda _: None)

        with pytest.raises(SchedulerUnavailableError, match="ManualScheduler"):
            run(main)
