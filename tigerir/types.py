"""Semantic types of the Tiger language."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .symbol import Symbol


class TyKind(Enum):
    """The kinds of Tiger types."""

    RECORD = 0
    NIL = 1
    INT = 2
    STRING = 3
    ARRAY = 4
    NAME = 5
    VOID = 6

    @property
    def label(self) -> str:
        return f"ty_{self.name.lower()}"


class Ty:
    """A Tiger type; types are compared by identity."""

    def __init__(self, kind: TyKind) -> None:
        self.kind = kind

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name})"


@dataclass(eq=False)
class TyField:
    """A named field of a record type."""

    name: Symbol
    ty: Optional[Ty]


class RecordTy(Ty):
    """A record type with an ordered list of fields."""

    def __init__(self, fields: Iterable[TyField] = ()) -> None:
        super().__init__(TyKind.RECORD)
        self.fields = list(fields)


class ArrayTy(Ty):
    """An array type with the given element type."""

    def __init__(self, element: Optional[Ty]) -> None:
        super().__init__(TyKind.ARRAY)
        self.element = element


class NameTy(Ty):
    """A named type whose definition may be filled in later."""

    def __init__(self, sym: Symbol, ty: Optional[Ty] = None) -> None:
        super().__init__(TyKind.NAME)
        self.sym = sym
        self.ty = ty


NIL = Ty(TyKind.NIL)
INT = Ty(TyKind.INT)
STRING = Ty(TyKind.STRING)
VOID = Ty(TyKind.VOID)


def describe(ty: Optional[Ty]) -> str:
    """Return a short debugging description of a type."""
    if ty is None:
        return "null"
    if isinstance(ty, NameTy):
        return f"{ty.kind.label}, {ty.sym.name}"
    return ty.kind.label


def describe_list(tys: Iterable[Optional[Ty]]) -> str:
    """Return a nested debugging description of a list of types."""
    items = list(tys)
    text = "null"
    for ty in reversed(items):
        text = f"TyList( {describe(ty)}, {text})"
    return text