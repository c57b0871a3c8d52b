"""Redefinition: swap a binding and refresh the providers that used it.

``redefine_constant`` replaces a local binding. Providers that already read
the old value keep it until ``reload_provider`` drops their memoized result.
"""

from __future__ import annotations

from scopewire import Container


def main() -> None:
    container = Container()
    container.constant("db", "primary")
    container.provider("service", lambda deps: f"service({deps['db']})")
    print(container.get("service"))  # => service(primary)

    container.redefine_constant("db", "replica")
    print(container.get("service"))  # => service(primary)

    container.reload_provider("service")
    print(container.get("service"))  # => service(replica)

    fresh = container.providers["service"]()
    print(f"fresh={fresh}")  # => fresh=service(replica)


if __name__ == "__main__":
    main()
