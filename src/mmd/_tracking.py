"""Build tracking: which module records are currently being built.

Uses a contextvar holding the stack of records whose builds are in
progress. A record is "active" exactly while it is on this stack, so cycle
detection never depends on flags surviving an exception.

Every begin_build() must be paired with end_build(), innermost first.
Entries are tagged with the registry that owns them, so engines sharing a
call stack (one engine's factory requiring from another) never see each
other's ids in error paths.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mmd.registry import ModuleRecord, Registry

    Entry = tuple[Registry, ModuleRecord]

# (owner, record) pairs being built, outermost first.
building: contextvars.ContextVar[tuple[Entry, ...]] = contextvars.ContextVar(
    "building", default=()
)


def begin_build(owner: Registry, record: ModuleRecord) -> contextvars.Token:
    """Mark record as active. Returns the token end_build() needs."""
    return building.set((*building.get(), (owner, record)))


def end_build(token: contextvars.Token) -> None:
    """Release the mark set by the matching begin_build()."""
    building.reset(token)


def is_building(record: ModuleRecord) -> bool:
    """Is record's build in progress on the current call stack?"""
    return any(entry is record for _owner, entry in building.get())


def building_path(owner: Registry) -> tuple[str, ...]:
    """Ids owner is currently building, outermost first. Useful in error messages."""
    return tuple(entry.id for entry_owner, entry in building.get() if entry_owner is owner)
