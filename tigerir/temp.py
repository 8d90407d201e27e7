"""Temporaries, labels and maps from temporaries to names."""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass
from itertools import count
from typing import Optional, TextIO

from .symbol import Symbol, symbol
from .table import Table

Label = Symbol

_temp_numbers = count(100)
_label_numbers = count(0)


@dataclass(frozen=True, eq=False)
class Temp:
    """A value held in a register, not yet assigned to a machine register."""

    num: int

    def __str__(self) -> str:
        return str(self.num)


def new_temp() -> Temp:
    """Create a fresh temporary and record its number in the name map."""
    temp = Temp(next(_temp_numbers))
    name_map().enter(temp, str(temp.num))
    return temp


def new_label() -> Label:
    """Create a fresh label named ``L<n>``."""
    return named_label(f"L{next(_label_numbers)}")


def named_label(name: str) -> Label:
    """Return the label with the given name."""
    return symbol(name)


class TempMap:
    """A map from temporaries to names, optionally layered over another."""

    def __init__(self, under: Optional[TempMap] = None) -> None:
        self._table = Table()
        self._under = under

    def enter(self, temp: Temp, name: str) -> None:
        """Bind ``temp`` to ``name`` in this layer."""
        self._table.enter(temp, name)

    def look(self, temp: Temp) -> Optional[str]:
        """Return the name for ``temp``, searching lower layers, or None."""
        name = self._table.look(temp)
        if name is not None:
            return name
        if self._under is not None:
            return self._under.look(temp)
        return None

    def layered(self, under: Optional[TempMap]) -> TempMap:
        """Return a map that consults this map's layers first, then ``under``."""
        below = self._under.layered(under) if self._under is not None else under
        result = TempMap(below)
        result._table = self._table
        return result

    def dump(self, out: TextIO) -> None:
        """Write every binding, layer by layer, to ``out``."""
        for temp, name in self._table.dump():
            out.write(f"t{temp.num} -> {name}\n")
        if self._under is not None:
            out.write("---------\n")
            self._under.dump(out)


@functools.lru_cache(maxsize=None)
def name_map() -> TempMap:
    """Return the map that names every temporary by its number."""
    return TempMap()


def temp_list_union(lhs: Iterable[Optional[Temp]], rhs: Iterable[Temp]) -> list[Temp]:
    """Return ``rhs`` preceded by the members of ``lhs`` it lacks.

    Missing members are prepended one by one, so they appear in reverse
    order; None entries in ``lhs`` are dropped.
    """
    right = list(rhs)
    missing = [t for t in lhs if t is not None and t not in right]
    return missing[::-1] + right


def temp_list_diff(lhs: Iterable[Temp], rhs: Iterable[Temp]) -> list[Temp]:
    """Return the members of ``lhs`` not in ``rhs``, in reverse order."""
    right = list(rhs)
    return [t for t in reversed(list(lhs)) if t not in right]


def replace_temp(temps: Iterable[Temp], old: Temp, new: Temp) -> list[Temp]:
    """Return ``temps`` with every occurrence of ``old`` replaced by ``new``."""
    return [new if t is old else t for t in temps]


def format_temps(temps: Iterable[Temp]) -> str:
    """Render a list of temporaries as a single debugging line."""
    return "".join(f"temp{t.num}, " for t in temps) + "\n"