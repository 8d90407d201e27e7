"""Generic tables whose bindings shadow earlier bindings of the same key."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any


class Table:
    """A mapping in which newer bindings hide, but do not remove, older ones.

    Bindings can be removed again in the reverse order in which they were
    entered, which uncovers whatever binding they were shadowing.
    """

    def __init__(self) -> None:
        self._bindings: dict[Hashable, list[Any]] = {}
        self._order: list[Hashable] = []

    def enter(self, key: Hashable, value: Any) -> None:
        """Bind ``key`` to ``value``, shadowing any earlier binding."""
        if key is None:
            raise ValueError("table keys must not be None")
        self._bindings.setdefault(key, []).append(value)
        self._order.append(key)

    def look(self, key: Hashable) -> Any:
        """Return the most recent value bound to ``key``, or None."""
        values = self._bindings.get(key)
        return values[-1] if values else None

    def pop(self) -> Hashable:
        """Remove the most recent binding and return its key."""
        if not self._order:
            raise IndexError("pop from an empty table")
        key = self._order.pop()
        values = self._bindings[key]
        values.pop()
        if not values:
            del self._bindings[key]
        return key

    def dump(self) -> list[tuple[Hashable, Any]]:
        """Return every binding, shadowed ones too, from newest to oldest."""
        remaining = {key: len(values) for key, values in self._bindings.items()}
        result = []
        for key in reversed(self._order):
            remaining[key] -= 1
            result.append((key, self._bindings[key][remaining[key]]))
        return result

    def __len__(self) -> int:
        return len(self._order)