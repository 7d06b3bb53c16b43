"""Normalization of define() arguments.

define() accepts several historical call shapes:

    define(id, dependencies, factory)
    define(id, factory)
    define(dependencies, factory)     # id taken from the namespace queue
    define(factory)                   # id taken from the namespace queue

normalize() maps all of them onto one Definition before anything touches
the registry.
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple, Sequence

from mmd.errors import DefinitionError
from mmd.exports import EXPORTS
from mmd.registry import ModuleRecord, format_id

_MISSING = object()


class Definition(NamedTuple):
    id: str
    dependencies: tuple[str, ...]
    factory: Any

    def to_record(self) -> ModuleRecord:
        """Build a registry record, lifting the first "exports" token out of the deps."""
        dependencies = list(self.dependencies)
        exports_slot = None
        if EXPORTS in dependencies:
            exports_slot = dependencies.index(EXPORTS)
            del dependencies[exports_slot]
        return ModuleRecord(self.id, tuple(dependencies), self.factory, exports_slot)


def _is_dependency_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def normalize(args: Sequence[Any], next_id: Callable[[], str | None]) -> Definition:
    """Sniff the call shape of args and return a Definition.

    next_id is only called when no id was supplied, so the anonymous queue
    is consumed exactly once per anonymous definition.
    """
    if len(args) > 3:
        raise DefinitionError(f"define() takes at most 3 arguments ({len(args)} given)")

    remaining = list(args)
    module_id = remaining.pop(0) if remaining and isinstance(remaining[0], str) else None
    dependencies = remaining.pop(0) if remaining and _is_dependency_list(remaining[0]) else ()
    factory = remaining.pop(0) if remaining else _MISSING
    if remaining:
        raise DefinitionError(f"Unexpected define() arguments: {remaining!r}")

    if factory is _MISSING or factory is None:
        raise DefinitionError("Invalid definition: missing factory")

    if not module_id:
        module_id = next_id()
    if not module_id:
        raise DefinitionError("Invalid definition: missing id/namespace")

    module_id = format_id(module_id)
    if not module_id:
        raise DefinitionError("Invalid definition: missing id/namespace")

    for dependency in dependencies:
        if not isinstance(dependency, str):
            raise DefinitionError(
                f"Invalid definition of '{module_id}': dependency ids must be strings, "
                f"got {dependency!r}"
            )

    return Definition(module_id, tuple(dependencies), factory)
