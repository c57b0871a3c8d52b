"""Errors: cyclic dependencies and how to break them.

Two providers that read each other inside their factory bodies fail with
``CyclicDependencyError``. Deferring one read behind an accessor resolves
the same graph.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from scopewire import Container, CyclicDependencyError, DuplicateBindingError


@dataclass
class Node:
    name: str
    peer: Callable[[], Any]


def main() -> None:
    eager = Container()
    eager.provider("foo", lambda deps: deps["bar"])
    eager.provider("bar", lambda deps: deps["foo"])
    try:
        eager.get("foo")
    except CyclicDependencyError as error:
        print(error)  # => Cyclic dependency detected: foo -> bar -> foo

    lazy = Container()
    lazy.provider("foo", lambda deps: Node("foo", lambda: deps.scope.get("bar")))
    lazy.provider("bar", lambda deps: Node("bar", lambda: deps.scope.get("foo")))
    print(f"peer={lazy.get('foo').peer().name}")  # => peer=bar

    try:
        lazy.constant("foo", "again")
    except DuplicateBindingError as error:
        print(f"duplicate={error.key}")  # => duplicate=foo


if __name__ == "__main__":
    main()
