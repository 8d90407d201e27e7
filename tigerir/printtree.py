"""Text rendering of intermediate representation trees."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TextIO

from .temp import name_map
from .tree import (
    BinOpExp,
    Call,
    CJump,
    Const,
    ESeq,
    Exp,
    ExpStm,
    Jump,
    LabelStm,
    Mem,
    Move,
    Name,
    Seq,
    Stm,
    TempExp,
)


def _indent(depth: int) -> str:
    return " " * (depth + 1)


def format_stm(stm: Stm, depth: int = 0) -> str:
    """Render a statement as an indented tree, without a trailing newline."""
    pad = _indent(depth)
    inner = depth + 1
    match stm:
        case Seq(left=left, right=right):
            return (
                f"{pad}SEQ(\n{format_stm(left, inner)},\n"
                f"{format_stm(right, inner)})"
            )
        case LabelStm(label=label):
            return f"{pad}LABEL {label.name}"
        case Jump(exp=exp):
            return f"{pad}JUMP(\n{format_exp(exp, inner)})"
        case CJump():
            if stm.true_label is None or stm.false_label is None:
                raise ValueError("conditional jump has unpatched labels")
            return (
                f"{pad}CJUMP({stm.op.name},\n{format_exp(stm.left, inner)},\n"
                f"{format_exp(stm.right, inner)},\n"
                f"{_indent(inner)}{stm.true_label.name},{stm.false_label.name})"
            )
        case Move(dst=dst, src=src):
            return f"{pad}MOVE(\n{format_exp(dst, inner)},\n{format_exp(src, inner)})"
        case ExpStm(exp=exp):
            return f"{pad}EXP(\n{format_exp(exp, inner)})"
    raise TypeError(f"not an IR statement: {stm!r}")


def format_exp(exp: Exp, depth: int = 0) -> str:
    """Render an expression as an indented tree, without a trailing newline."""
    pad = _indent(depth)
    inner = depth + 1
    match exp:
        case BinOpExp(op=op, left=left, right=right):
            return (
                f"{pad}BINOP({op.name},\n{format_exp(left, inner)},\n"
                f"{format_exp(right, inner)})"
            )
        case Mem(addr=addr):
            return f"{pad}MEM(\n{format_exp(addr, inner)})"
        case TempExp(temp=temp):
            name = name_map().look(temp)
            return f"{pad}TEMP t{name if name is not None else temp.num}"
        case ESeq(stm=stm, exp=value):
            return f"{pad}ESEQ(\n{format_stm(stm, inner)},\n{format_exp(value, inner)})"
        case Name(label=label):
            return f"{pad}NAME {label.name}"
        case Const(value=value):
            return f"{pad}CONST {value}"
        case Call(fun=fun, args=args):
            parts = [f"{pad}CALL(\n{format_exp(fun, inner)}"]
            parts.extend(f",\n{format_exp(arg, depth + 2)}" for arg in args)
            return "".join(parts) + ")"
    raise TypeError(f"not an IR expression: {exp!r}")


def format_stm_list(stms: Iterable[Stm]) -> str:
    """Render each statement at depth zero, each followed by a newline."""
    return "".join(format_stm(stm) + "\n" for stm in stms)


def print_stm_list(out: TextIO, stms: Iterable[Stm]) -> None:
    """Write each statement to ``out``, one tree after another."""
    out.write(format_stm_list(stms))