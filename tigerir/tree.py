"""Intermediate representation trees: statements and expressions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .temp import Label, Temp


class BinOp(Enum):
    """Arithmetic and bitwise operators."""

    PLUS = 0
    MINUS = 1
    TIMES = 2
    DIVIDE = 3
    AND = 4
    OR = 5
    LSHIFT = 6
    RSHIFT = 7
    ARSHIFT = 8
    XOR = 9


class RelOp(Enum):
    """Comparison operators used by conditional jumps."""

    EQ = 0
    NE = 1
    LT = 2
    GT = 3
    LE = 4
    GE = 5
    ULT = 6
    ULE = 7
    UGT = 8
    UGE = 9


class Stm:
    """Base class of IR statements."""

    __slots__ = ()


class Exp:
    """Base class of IR expressions."""

    __slots__ = ()


@dataclass(eq=False)
class Seq(Stm):
    """Run ``left`` and then ``right``."""

    left: Optional[Stm]
    right: Optional[Stm]


@dataclass(eq=False)
class LabelStm(Stm):
    """Define ``label`` at this point of the code."""

    label: Label


@dataclass(eq=False)
class Jump(Stm):
    """Jump to the address ``exp``; ``jumps`` lists every label it may reach."""

    exp: Exp
    jumps: list[Label] = field(default_factory=list)


@dataclass(eq=False)
class CJump(Stm):
    """Compare two values and jump to one of two labels.

    The labels may be left unset at first and filled in later.
    """

    op: RelOp
    left: Exp
    right: Exp
    true_label: Optional[Label] = None
    false_label: Optional[Label] = None


@dataclass(eq=False)
class Move(Stm):
    """Store the value of ``src`` in ``dst`` (a temporary or memory cell)."""

    dst: Exp
    src: Exp


@dataclass(eq=False)
class ExpStm(Stm):
    """Evaluate ``exp`` and discard its value."""

    exp: Exp


@dataclass(eq=False)
class BinOpExp(Exp):
    """Apply a binary operator to two values."""

    op: BinOp
    left: Exp
    right: Exp


@dataclass(eq=False)
class Mem(Exp):
    """The word in memory at address ``addr``."""

    addr: Exp


@dataclass(eq=False)
class TempExp(Exp):
    """The value of a temporary."""

    temp: Temp


@dataclass(eq=False)
class ESeq(Exp):
    """Run ``stm`` for its effects, then evaluate ``exp``."""

    stm: Optional[Stm]
    exp: Exp


@dataclass(eq=False)
class Name(Exp):
    """The address of a label."""

    label: Label


@dataclass(eq=False)
class Const(Exp):
    """An integer constant."""

    value: int


@dataclass(eq=False)
class Call(Exp):
    """Call ``fun`` with the given arguments."""

    fun: Exp
    args: list[Exp] = field(default_factory=list)


_NOT_REL = {
    RelOp.EQ: RelOp.NE,
    RelOp.NE: RelOp.EQ,
    RelOp.LT: RelOp.GE,
    RelOp.GE: RelOp.LT,
    RelOp.GT: RelOp.LE,
    RelOp.LE: RelOp.GT,
    RelOp.ULT: RelOp.UGE,
    RelOp.UGE: RelOp.ULT,
    RelOp.ULE: RelOp.UGT,
    RelOp.UGT: RelOp.ULE,
}

_COMMUTE = {
    RelOp.EQ: RelOp.EQ,
    RelOp.NE: RelOp.NE,
    RelOp.LT: RelOp.GT,
    RelOp.GE: RelOp.LE,
    RelOp.GT: RelOp.LT,
    RelOp.LE: RelOp.GE,
    RelOp.ULT: RelOp.UGT,
    RelOp.UGE: RelOp.ULE,
    RelOp.ULE: RelOp.UGE,
    RelOp.UGT: RelOp.ULT,
}


def not_rel(op: RelOp) -> RelOp:
    """Return the operator such that ``a op b`` equals ``not (a not_rel(op) b)``."""
    try:
        return _NOT_REL[op]
    except (KeyError, TypeError):
        raise ValueError(f"not a relational operator: {op!r}") from None


def commute(op: RelOp) -> RelOp:
    """Return the operator such that ``a op b`` equals ``b commute(op) a``."""
    try:
        return _COMMUTE[op]
    except (KeyError, TypeError):
        raise ValueError(f"not a relational operator: {op!r}") from None