from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from scopewire.container import Container

_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Expose the engine helpers of one container to factories and invoked functions.

    Available as ``deps.scope``. Helpers are bound to the container that owns
    the dependency surface, so inside ``invoke`` they register on the
    ephemeral child and nothing leaks to the caller's container.

    Examples:
        .. code-block:: python

            def handler(deps: Dependencies) -> User:
                deps.scope.constant("data", {"users": {}})
                deps.scope.invoke(add_user)(User(id=0, name="Peter Parker"))
                return deps.scope.invoke(get_user_by_id)(0)

    """

    get: Callable[..., Any]
    has: Callable[[str], bool]
    invoke: Callable[..., Any]
    constant: Callable[[str, Any], Any]
    provider: Callable[..., None]
    eager_provider: Callable[..., None]
    extend: Callable[[], Container]

    @classmethod
    def of(cls, container: Container) -> Capabilities:
        return cls(
            get=container.get,
            has=container.has,
            invoke=container.invoke,
            constant=container.constant,
            provider=container.provider,
            eager_provider=container.eager_provider,
            extend=container.extend,
        )


class Dependencies(Mapping[str, Any]):
    """Read-only view of every dependency visible from one container.

    Item access resolves lazily: the first read of a provider-bound key runs
    its factory and later reads return the memoized value. Keys bound on the
    container shadow keys of the same name on its ancestors.

    Membership tests, iteration and ``len`` only inspect bindings and never
    run a factory. ``values()`` and ``items()`` resolve every visible key.

    Engine helpers are kept out of the key space and live on ``scope``.
    """

    __slots__ = ("_container", "scope")

    def __init__(self, container: Container) -> None:
        self._container = container
        self.scope = Capabilities.of(container)

    def __getitem__(self, key: str) -> Any:
        value = self._container._lookup(key)  # noqa: SLF001
        if value is _MISSING:
            raise KeyError(key)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        value = self._container._lookup(key)  # noqa: SLF001
        return default if value is _MISSING else value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._container.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._container._chain_keys())  # noqa: SLF001

    def __len__(self) -> int:
        return len(self._container._chain_keys())  # noqa: SLF001

    # Mapping equality would resolve every key.
    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"Dependencies({self._container._chain_keys()!r})"  # noqa: SLF001


class Providers(Mapping[str, Callable[[], Any]]):
    """Read-only view of the raw factories visible from one container.

    Each value is a zero-argument callable that runs the bound factory again
    against the dependency surface of the container owning the binding. The
    memoization cache is neither read nor written.

    Examples:
        .. code-block:: python

            container.provider("count", lambda deps: next(counter))
            container.get("count")  # memoized
            fresh = container.providers["count"]()  # runs the factory again

    """

    __slots__ = ("_container",)

    def __init__(self, container: Container) -> None:
        self._container = container

    def __getitem__(self, key: str) -> Callable[[], Any]:
        binding = self._container._find_binding(key)  # noqa: SLF001
        if binding is None:
            raise KeyError(key)
        owner, factory = binding
        return partial(factory, owner.dependencies)

    def __iter__(self) -> Iterator[str]:
        return iter(self._container._chain_keys())  # noqa: SLF001

    def __len__(self) -> int:
        return len(self._container._chain_keys())  # noqa: SLF001
