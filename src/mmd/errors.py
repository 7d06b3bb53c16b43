"""Errors raised by define() and require().

All errors are synchronous and fatal to the call that raised them. Nothing
is retried internally; callers wrap define/require in try/except.
"""

from __future__ import annotations


class MMDError(Exception):
    """Base class for all engine errors."""


class DefinitionError(MMDError, ValueError):
    """A definition is missing its id or its factory."""


class UnresolvedReferenceError(MMDError, LookupError):
    """A requested (or transitively required) id has no definition."""

    def __init__(self, module_id: str) -> None:
        super().__init__(f"{module_id} is undefined")
        self.module_id = module_id


class CircularReferenceError(MMDError, RuntimeError):
    """A module was re-entered while it was still being built."""

    def __init__(self, module_id: str, path: tuple[str, ...] = ()) -> None:
        message = f"circular reference to {module_id}"
        if path:
            message += f" ({' -> '.join((*path, module_id))})"
        super().__init__(message)
        self.module_id = module_id
        self.path = path
