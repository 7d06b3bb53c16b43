"""The exports container injected in place of the "exports" dependency.

Modules that declare "exports" receive a fresh Exports object and populate
it instead of returning a value. Because the container exists before the
factory runs, mutually dependent modules can hold live handles to each
other's exports without tripping cycle detection.
"""

from __future__ import annotations

from typing import Any

EXPORTS = "exports"


class Exports(dict):
    """A dict whose keys are also readable and writable as attributes.

    Usage:
        def factory(exports):
            exports.greet = lambda: "hi"
            exports["version"] = 2
    """

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"Exports({dict.__repr__(self)})"
