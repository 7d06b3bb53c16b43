"""Recursive dependency resolution: the heart of MMD.

require_all() walks the dependency graph depth-first, left to right. The
walk keeps its own stack of frames rather than recursing in Python, so
dependency chains are not bounded by the interpreter's recursion limit.
Each unbuilt record is marked active (begin_build) when its frame is
pushed and released (end_build) when the frame is popped or the walk
fails. Built values are memoized on the record, so a factory runs at most
once per definition.

Exports-style modules get their Exports container before their own
dependencies are resolved. A cyclic re-entry into such a module receives
the live (possibly still empty) container instead of a circular reference
error. The container belongs to the record until it is built, so a retry
after a failed build refills the same object its partners already hold.
"""

from __future__ import annotations

import contextvars
import logging
from typing import Any, Iterable

from mmd._tracking import begin_build, building_path, end_build
from mmd.errors import CircularReferenceError
from mmd.exports import Exports
from mmd.registry import ModuleRecord, Registry, format_id

logger = logging.getLogger("mmd.resolver")


class _Frame:
    """One record being built: the dependency values gathered so far."""

    __slots__ = ("record", "values", "next_dependency", "token")

    def __init__(self, record: ModuleRecord, token: contextvars.Token) -> None:
        self.record = record
        self.values: list[Any] = []
        self.next_dependency = 0
        self.token = token


class Resolver:
    """Resolves module ids against a Registry."""

    def __init__(self, registry: Registry, handle: object, self_name: str) -> None:
        self._registry = registry
        self._handle = handle
        self._self_name = self_name

    def require_all(self, ids: Iterable[str]) -> list[Any]:
        """Resolve ids in order. Any failure aborts the whole request."""
        return [self.require_one(module_id) for module_id in ids]

    def require_one(self, module_id: str) -> Any:
        ready, found = self._visit(module_id)
        if ready:
            return found
        return self._build(found)

    def _visit(self, module_id: str) -> tuple[bool, Any]:
        """Return (True, value) if module_id needs no build, else (False, record)."""
        module_id = format_id(module_id)
        if module_id == self._self_name:
            return True, self._handle

        record = self._registry.lookup(module_id)
        if record.built:
            return True, record.value

        if not callable(record.factory):
            logger.debug("Resolved literal module '%s'", module_id)
            record.resolve(record.factory)
            return True, record.value

        if record.active:
            if record.exports is not None:
                return True, record.exports
            raise CircularReferenceError(module_id, building_path(self._registry))

        return False, record

    def _build(self, root: ModuleRecord) -> Any:
        frames = [self._begin(root)]
        try:
            while True:
                frame = frames[-1]
                dependencies = frame.record.dependencies
                if frame.next_dependency < len(dependencies):
                    module_id = dependencies[frame.next_dependency]
                    frame.next_dependency += 1
                    ready, found = self._visit(module_id)
                    if ready:
                        frame.values.append(found)
                    else:
                        frames.append(self._begin(found))
                    continue

                value = self._invoke(frame)
                frames.pop()
                end_build(frame.token)
                frame.record.resolve(value)
                logger.debug("Built module '%s'", frame.record.id)
                if not frames:
                    return value
                frames[-1].values.append(value)
        except BaseException:
            if frames:
                logger.debug("Failed to build module '%s'", frames[-1].record.id)
            for frame in reversed(frames):
                end_build(frame.token)
            raise

    def _begin(self, record: ModuleRecord) -> _Frame:
        if record.exports_slot is not None:
            if record.exports is None:
                record.exports = Exports()
            else:
                record.exports.clear()
        logger.debug("Building module '%s' (depends on %s)", record.id, list(record.dependencies))
        return _Frame(record, begin_build(self._registry, record))

    def _invoke(self, frame: _Frame) -> Any:
        record = frame.record
        values = frame.values
        if record.exports_slot is None:
            return record.factory(*values)
        values.insert(record.exports_slot, record.exports)
        record.factory(*values)
        return record.exports
