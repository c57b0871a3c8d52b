from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

from typing_extensions import Self

from scopewire.dependencies import _MISSING, Dependencies, Providers
from scopewire.exceptions import (
    DuplicateBindingError,
    InvalidKeyError,
    InvalidRegistrationError,
    UndefinedBindingError,
)
from scopewire.lock_mode import LockMode, LockModeLike, build_lock, normalize_lock_mode
from scopewire.resolution_stack import resolving
from scopewire.scheduler import AsyncioScheduler, Scheduler

T = TypeVar("T")
R = TypeVar("R")

Factory = Callable[[Dependencies], Any]

logger = logging.getLogger(__name__)


class _Constant:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __call__(self, _dependencies: Dependencies) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"constant({self.value!r})"


class Container:
    """Register named constants and lazy providers, and resolve them by key.

    Containers form a chain: a child created with ``extend()`` sees every key
    of its ancestors and may shadow any of them with a local binding, without
    touching the ancestor. Providers run on first access, receive the
    dependency surface of the container they are bound on, and are memoized
    per container until redefined or reloaded.

    Examples:
        .. code-block:: python

            container = Container()
            container.constant("dsn", "sqlite://")
            container.provider("db", lambda deps: connect(deps["dsn"]))

            db = container.get("db")

            request = container.extend()
            request.constant("dsn", "sqlite:///:memory:")
            assert request.get("db") is db  # bound on the parent

    """

    def __init__(
        self,
        parent: Container | None = None,
        *,
        lock_mode: LockModeLike | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize a root container, or a child of ``parent``.

        Args:
            parent: Container to fall back to for keys not bound locally.
            lock_mode: ``LockMode.THREAD`` to share this container between
                threads, ``LockMode.NONE`` for cooperative single-threaded use.
                String forms ``"thread"``/``"none"`` are accepted. Inherited
                from ``parent`` when omitted; roots default to ``NONE``.
            scheduler: Queue used to defer eager provider resolution. Inherited
                from ``parent`` when omitted; roots default to
                ``AsyncioScheduler``.

        Raises:
            InvalidRegistrationError: If ``lock_mode`` is not recognized.

        """
        self._parent = parent

        if lock_mode is not None:
            self._lock_mode = normalize_lock_mode(lock_mode)
        elif parent is not None:
            self._lock_mode = parent.lock_mode
        else:
            self._lock_mode = LockMode.NONE
        self._lock = build_lock(self._lock_mode)

        if scheduler is not None:
            self._scheduler: Scheduler = scheduler
        elif parent is not None:
            self._scheduler = parent.scheduler
        else:
            self._scheduler = AsyncioScheduler()

        self._bindings: dict[str, Factory] = {}
        self._resolved: dict[str, Any] = {}
        # Bumped on every invalidation so an in-flight factory whose key was
        # redefined or reloaded meanwhile does not memoize a stale value.
        self._generation = 0

        self._dependencies = Dependencies(self)
        self._providers = Providers(self)

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def dependencies(self) -> Dependencies:
        """Dependency surface of this container, as passed to factories."""
        return self._dependencies

    @property
    def providers(self) -> Providers:
        """Raw factories visible from this container, bypassing the cache."""
        return self._providers

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self.keys()!r}, has_parent={self._parent is not None})"

    # region Registration

    def constant(self, key: str, value: T) -> T:
        """Bind ``key`` to a fixed value.

        Args:
            key: Dependency key.
            value: Value returned for ``key``. ``None`` is a valid value.

        Returns:
            ``value``, unchanged.

        Raises:
            DuplicateBindingError: If ``key`` is already bound on this
                container. Keys bound on ancestors may be shadowed.
            InvalidKeyError: If ``key`` is not a string.

        """
        self._bind(key, _Constant(value))
        logger.debug("Bound constant '%s'", key)
        return value

    def provider(self, key: str, factory: Factory) -> None:
        """Bind ``key`` to a factory that runs once, on first access.

        The factory receives this container's ``dependencies`` and may read
        other keys from it, or use ``dependencies.scope`` helpers. Its return
        value is memoized as is, including ``None`` and unawaited coroutines.

        Args:
            key: Dependency key.
            factory: Callable taking the dependency surface.

        Raises:
            DuplicateBindingError: If ``key`` is already bound on this
                container.
            InvalidKeyError: If ``key`` is not a string.
            InvalidRegistrationError: If ``factory`` is not callable.

        Examples:
            .. code-block:: python

                container.constant("db", db)
                container.provider("users", lambda deps: UserRepository(deps["db"]))

        """
        self._bind(key, _validate_factory(key, factory))
        logger.debug("Bound provider '%s'", key)

    def eager_provider(self, key: str, factory: Factory) -> None:
        """Bind ``key`` like ``provider`` and force its first access on a later turn.

        Needs a scheduler that can defer: the default ``AsyncioScheduler`` only
        works inside a running event loop. Synchronous programs, including
        functions passed to ``run``, should configure
        ``scheduler=ManualScheduler()`` and call its ``run_pending()``.

        The forced access is queued on this container's scheduler, so it runs
        after the current synchronous registrations complete and can depend on
        constants bound later in the same turn. Errors raised by the factory
        at that point surface through the scheduler (for ``AsyncioScheduler``,
        the loop's exception handler).

        Raises:
            DuplicateBindingError: If ``key`` is already bound on this
                container.
            SchedulerUnavailableError: If the scheduler cannot defer calls, for
                example ``AsyncioScheduler`` without a running loop. The binding
                is rolled back.

        """
        factory = _validate_factory(key, factory)
        with self._lock:
            self._bind(key, factory)
            try:
                self._scheduler.call_soon(partial(self._lookup, key))
            except Exception:
                del self._bindings[key]
                raise
        logger.debug("Bound eager provider '%s'", key)

    def redefine_constant(self, key: str, value: Any) -> None:
        """Replace the local binding of ``key`` with a fixed value.

        Any memoized value for ``key`` is dropped. Providers that already read
        the old value keep it until reloaded with ``reload_provider``.

        Raises:
            UndefinedBindingError: If ``key`` is not bound on this container.

        """
        self._rebind(key, _Constant(value))

    def redefine_provider(self, key: str, factory: Factory) -> None:
        """Replace the local binding of ``key`` with a new factory.

        The new factory runs once, on the next access.

        Raises:
            UndefinedBindingError: If ``key`` is not bound on this container.
            InvalidRegistrationError: If ``factory`` is not callable.

        """
        self._rebind(key, _validate_factory(key, factory))

    def reload_provider(self, key: str) -> None:
        """Drop the memoized value of ``key`` so its factory runs again on next access.

        Raises:
            UndefinedBindingError: If ``key`` is not bound on this container.

        """
        with self._lock:
            if key not in self._bindings:
                raise UndefinedBindingError(key)
            self._resolved.pop(key, None)
            self._generation += 1
        logger.debug("Reloaded provider '%s'", key)

    def reload_all_providers(self) -> None:
        """Drop every memoized value on this container. Ancestors are untouched."""
        with self._lock:
            self._resolved.clear()
            self._generation += 1
        logger.debug("Reloaded all providers")

    def _bind(self, key: str, factory: Factory) -> None:
        if not isinstance(key, str):
            raise InvalidKeyError(key)
        with self._lock:
            if key in self._bindings:
                raise DuplicateBindingError(key)
            self._bindings[key] = factory

    def _rebind(self, key: str, factory: Factory) -> None:
        with self._lock:
            if key not in self._bindings:
                raise UndefinedBindingError(key)
            self._bindings[key] = factory
            self._resolved.pop(key, None)
            self._generation += 1
        logger.debug("Redefined '%s'", key)

    # endregion Registration

    # region Resolution

    def get(self, key: str, default: Any = None) -> Any:
        """Resolve ``key`` on this container, falling back to its ancestors.

        Only ``key`` is resolved, and its factory runs at most once until
        redefined or reloaded.

        Args:
            key: Dependency key.
            default: Returned when no container in the chain binds ``key``.

        Raises:
            CyclicDependencyError: If ``key`` re-enters its own resolution.

        """
        return self._dependencies.get(key, default)

    def has(self, key: str) -> bool:
        """Check whether ``key`` is bound here or on any ancestor. Never runs a factory."""
        return self._find_binding(key) is not None

    def has_own(self, key: str) -> bool:
        """Check whether ``key`` is bound on this container. Never runs a factory."""
        with self._lock:
            return key in self._bindings

    def keys(self) -> list[str]:
        """Return the keys bound on this container, in registration order."""
        with self._lock:
            return list(self._bindings)

    def _lookup(self, key: str) -> Any:
        with self._lock:
            if key in self._bindings:
                return self._resolve_local(key)
        if self._parent is None:
            return _MISSING
        return self._parent._lookup(key)

    def _resolve_local(self, key: str) -> Any:
        if key in self._resolved:
            return self._resolved[key]

        factory = self._bindings[key]
        generation = self._generation
        with resolving(id(self), key):
            value = factory(self._dependencies)

        if self._bindings.get(key) is factory and self._generation == generation:
            self._resolved[key] = value
            logger.debug("Resolved '%s'", key)
        else:
            logger.debug("Resolved '%s' without memoizing: invalidated during resolution", key)
        return value

    def _find_binding(self, key: str) -> tuple[Container, Factory] | None:
        container: Container | None = self
        while container is not None:
            with container._lock:
                factory = container._bindings.get(key)
            if factory is not None:
                return container, factory
            container = container._parent
        return None

    def _chain_keys(self) -> list[str]:
        keys: dict[str, None] = {}
        container: Container | None = self
        while container is not None:
            keys.update(dict.fromkeys(container.keys()))
            container = container._parent
        return list(keys)

    # endregion Resolution

    # region Scopes

    def extend(self) -> Self:
        """Create a durable child container whose parent is this one.

        The child inherits lock mode and scheduler. Registrations on the child
        never affect this container.
        """
        return type(self)(self)

    def invoke(self, fn: Callable[[Dependencies], R]) -> R:
        """Call ``fn`` with the dependency surface of a fresh ephemeral child.

        Registrations ``fn`` makes through ``dependencies.scope`` land on the
        child and are discarded with it; they are visible to nested
        ``invoke`` calls made from the same child. The return value is passed
        through unchanged: an awaitable is returned unawaited, and exceptions
        raised synchronously by ``fn`` propagate.

        Examples:
            .. code-block:: python

                def handler(deps: Dependencies) -> str:
                    deps.scope.constant("message", "Hello world")
                    return deps.scope.get("message")

                assert container.invoke(handler) == "Hello world"
                assert not container.has("message")

        """
        return fn(self.extend().dependencies)

    # endregion Scopes


def _validate_factory(key: str, factory: Any) -> Factory:
    if not callable(factory):
        msg = f"Provider for '{key}' must be callable, got {type(factory).__name__}."
        raise InvalidRegistrationError(msg)
    return factory
