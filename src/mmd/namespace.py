"""Anonymous-id queue.

Definitions that omit an id take the oldest pending id from this queue.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable


class Namespace:
    """FIFO queue of ids waiting for anonymous definitions."""

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[str] | None = None) -> None:
        self._ids: deque[str] = deque(ids or ())

    def add(self, module_id: str) -> Namespace:
        """Queue an id. Returns self so calls chain: ns.add("a").add("b")."""
        self._ids.append(module_id)
        return self

    def clear(self) -> None:
        self._ids.clear()

    def list(self) -> tuple[str, ...]:
        """Pending ids, oldest first."""
        return tuple(self._ids)

    def take(self) -> str | None:
        """Pop the oldest pending id, or None when the queue is empty."""
        return self._ids.popleft() if self._ids else None

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"Namespace({list(self._ids)!r})"
