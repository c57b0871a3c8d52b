"""Async: eager providers and ``run_async``.

Eager providers run on the next loop iteration, after the registrations of
the current turn. ``run_async`` invokes a function in a fresh container on a
later iteration and awaits its result.
"""

from __future__ import annotations

import asyncio

from scopewire import Container, Dependencies, run_async


def warm_up(deps: Dependencies) -> None:
    print(f"warming {deps['cache']}")  # => warming redis


async def fetch_greeting(deps: Dependencies) -> str:
    deps.scope.constant("name", "world")
    await asyncio.sleep(0)
    return f"hello {deps['name']}"


async def main() -> None:
    container = Container()
    container.eager_provider("warmup", warm_up)
    container.constant("cache", "redis")
    await asyncio.sleep(0)

    print(await run_async(fetch_greeting))  # => hello world


if __name__ == "__main__":
    asyncio.run(main())
