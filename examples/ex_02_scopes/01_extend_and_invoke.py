"""Scopes: durable children with ``extend`` and ephemeral ones with ``invoke``.

A child sees every key of its parent and may shadow any of them. Functions
passed to ``invoke`` get a throwaway child: whatever they register is gone
when they return.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from scopewire import Container, Dependencies


def add_user(deps: Dependencies) -> Callable[[dict[str, Any]], None]:
    def add(user: dict[str, Any]) -> None:
        deps["data"]["users"][user["id"]] = user

    return add


def get_user_by_id(deps: Dependencies) -> Callable[[int], dict[str, Any]]:
    return lambda user_id: deps["data"]["users"][user_id]


def handle_request(deps: Dependencies) -> str:
    deps.scope.constant("data", {"users": {}})
    deps.scope.invoke(add_user)({"id": 0, "name": "Peter Parker"})
    return deps.scope.invoke(get_user_by_id)(0)["name"]


def main() -> None:
    app = Container()
    app.constant("env", "production")

    tenant = app.extend()
    tenant.constant("env", "staging")
    print(f"app_env={app.get('env')}")  # => app_env=production
    print(f"tenant_env={tenant.get('env')}")  # => tenant_env=staging

    print(f"user={app.invoke(handle_request)}")  # => user=Peter Parker
    print(f"leaked={app.has('data')}")  # => leaked=False


if __name__ == "__main__":
    main()
