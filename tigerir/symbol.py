"""Interned symbols and scoped symbol tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .table import Table


@dataclass(frozen=True, eq=False)
class Symbol:
    """A unique name; two symbols with the same name are the same object."""

    name: str

    def __str__(self) -> str:
        return self.name


_interned: dict[str, Symbol] = {}


def symbol(name: str) -> Symbol:
    """Return the unique symbol for ``name``, creating it on first use."""
    sym = _interned.get(name)
    if sym is None:
        sym = _interned[name] = Symbol(name)
    return sym


_MARK = Symbol("<mark>")


class SymbolTable:
    """A mapping from symbols to values with nested scopes."""

    def __init__(self) -> None:
        self._table = Table()
        self._depth = 0

    def enter(self, sym: Symbol, value: Any) -> None:
        """Bind ``sym`` to ``value``, shadowing any earlier binding."""
        self._table.enter(sym, value)

    def look(self, sym: Symbol) -> Any:
        """Return the most recent binding of ``sym``, or None."""
        return self._table.look(sym)

    def begin_scope(self) -> None:
        """Open a new scope."""
        self._table.enter(_MARK, None)
        self._depth += 1

    def end_scope(self) -> None:
        """Drop every binding made since the matching ``begin_scope``."""
        if self._depth == 0:
            raise RuntimeError("end_scope without a matching begin_scope")
        while self._table.pop() is not _MARK:
            pass
        self._depth -= 1

    def dump(self) -> list[tuple[Symbol, Any]]:
        """Return all bindings, shadowed ones too, newest first."""
        return [(key, value) for key, value in self._table.dump() if key is not _MARK]