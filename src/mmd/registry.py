"""Module registry: the single owner of all module state.

A Registry maps normalized ids to ModuleRecords. Records are created by
define(), mutated only by the Resolver (memoized value, live exports), and
destroyed only by undef().
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from mmd import _tracking
from mmd.errors import UnresolvedReferenceError

LEADING_CHARACTERS = re.compile(r"^(?:\.+/)+")

_UNSET = object()


def format_id(module_id: str) -> str:
    """Strip leading dots and slashes: "./a", "../a" and "a" are the same id."""
    return LEADING_CHARACTERS.sub("", module_id)


class ModuleRecord:
    """One registered module: its dependencies, factory, and build state."""

    __slots__ = ("id", "dependencies", "factory", "exports_slot", "exports", "_value")

    def __init__(
        self,
        module_id: str,
        dependencies: tuple[str, ...],
        factory: Any,
        exports_slot: int | None = None,
    ) -> None:
        self.id = module_id
        self.dependencies = dependencies
        self.factory = factory
        self.exports_slot = exports_slot
        # Exports container, kept across failed attempts until the record is built.
        self.exports: dict | None = None
        self._value: Any = _UNSET

    @property
    def built(self) -> bool:
        return self._value is not _UNSET

    @property
    def active(self) -> bool:
        return _tracking.is_building(self)

    @property
    def value(self) -> Any:
        if self._value is _UNSET:
            raise LookupError(f"Module '{self.id}' has not been built")
        return self._value

    def resolve(self, value: Any) -> None:
        """Memoize value. Later requires return it without re-running the factory."""
        self._value = value
        self.exports = None

    def __repr__(self) -> str:
        if self.active:
            state = "building"
        elif self.built:
            state = f"built={self._value!r}"
        else:
            state = "unbuilt"
        return f"ModuleRecord({self.id!r}, {list(self.dependencies)!r}, {state})"


class Registry:
    """Mapping from normalized module id to ModuleRecord."""

    def __init__(self) -> None:
        self._records: dict[str, ModuleRecord] = {}

    def add(self, record: ModuleRecord) -> ModuleRecord | None:
        """Insert record, silently replacing any previous one. Returns the replaced record."""
        previous = self._records.get(record.id)
        self._records[record.id] = record
        return previous

    def remove(self, module_id: str) -> bool:
        """Delete the record for module_id if present. Returns whether one was removed."""
        return self._records.pop(format_id(module_id), None) is not None

    def get(self, module_id: str) -> ModuleRecord | None:
        return self._records.get(format_id(module_id))

    def lookup(self, module_id: str) -> ModuleRecord:
        """Return the record for module_id or raise UnresolvedReferenceError."""
        module_id = format_id(module_id)
        try:
            return self._records[module_id]
        except KeyError:
            raise UnresolvedReferenceError(module_id) from None

    def __contains__(self, module_id: object) -> bool:
        return isinstance(module_id, str) and format_id(module_id) in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))

    def __repr__(self) -> str:
        return f"Registry({sorted(self._records)!r})"
