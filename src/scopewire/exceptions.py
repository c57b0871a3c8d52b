from __future__ import annotations

from collections.abc import Sequence


class ScopewireError(Exception):
    """Represent a base class for all scopewire-specific failures.

    Catch this type when you want to handle any scopewire error path without
    matching each concrete exception class individually. Errors raised by
    provider factories or by functions passed to ``invoke`` are never wrapped
    in this type.
    """


class InvalidRegistrationError(ScopewireError):
    """Signal invalid registration arguments or container configuration.

    Raised by ``Container.provider`` and friends when the factory is not
    callable, and by ``Container(...)`` when ``lock_mode`` is not recognized.
    """


class InvalidKeyError(InvalidRegistrationError):
    """Signal a dependency key that is not a string."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Dependency keys must be strings, got {type(key).__name__}: {key!r}.")


class DuplicateBindingError(ScopewireError):
    """Signal a second registration of a key on the same container.

    Raised by ``Container.constant``, ``Container.provider`` and
    ``Container.eager_provider`` when ``key`` already has a local binding.
    Bindings inherited from a parent container do not count: shadowing them is
    allowed.

    Typical fixes are ``redefine_constant``/``redefine_provider`` for an
    intentional replacement, or registering on an ``extend()``-ed child.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"Cannot redefine dependency '{key}': it is already bound on this container.",
        )


class UndefinedBindingError(ScopewireError):
    """Signal redefinition or reload of a key with no local binding.

    Raised by ``redefine_constant``, ``redefine_provider`` and
    ``reload_provider``. These operations never reach into the parent chain,
    so a key bound only on an ancestor is undefined here.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Dependency '{key}' is not bound on this container.")


class CyclicDependencyError(ScopewireError):
    """Signal a key that re-entered its own synchronous resolution.

    ``path`` lists every key of the resolution stack in traversal order,
    across parents and ``invoke`` scopes, followed by the re-entered key, for
    example ``("foo", "bar", "foo")``.

    Typical fix is deferring one side of the cycle: return an object whose
    accessor reads the other key when called, instead of reading it inside the
    factory body.
    """

    def __init__(self, key: str, path: Sequence[str]) -> None:
        self.key = key
        self.path = tuple(path)
        super().__init__(f"Cyclic dependency detected: {' -> '.join(self.path)}")


class SchedulerUnavailableError(ScopewireError):
    """Signal a deferred call requested without a usable scheduler.

    Raised by ``AsyncioScheduler.call_soon`` (and therefore by
    ``Container.eager_provider`` and ``run_async``) outside of a running event
    loop.

    Typical fix is registering eager providers from inside a coroutine, or
    configuring the container with ``scheduler=ManualScheduler()`` in
    synchronous programs.
    """
