"""Quickstart: constants, lazy providers and memoization.

Bind a configuration value, describe how to build services from it, and let
the container build each service once, on first access.
"""

from __future__ import annotations

from scopewire import Container, Dependencies


class Database:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


def build_database(deps: Dependencies) -> Database:
    print("building database")  # => building database
    return Database(deps["dsn"])


def main() -> None:
    container = Container()
    container.constant("dsn", "sqlite:///app.db")
    container.provider("database", build_database)
    container.provider("users", lambda deps: UserRepository(deps["database"]))

    users = container.get("users")
    print(f"dsn={users.database.dsn}")  # => dsn=sqlite:///app.db
    print(f"memoized={container.get('users') is users}")  # => memoized=True
    print(f"keys={sorted(container.dependencies)}")  # => keys=['database', 'dsn', 'users']


if __name__ == "__main__":
    main()
