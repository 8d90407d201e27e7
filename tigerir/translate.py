"""Translation of Tiger constructs into intermediate representation trees."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Optional, Union

from .frame import (
    WORD_SIZE,
    Access as FrameAccess,
    Frame,
    ProcFrag,
    StringFrag,
    access_exp,
    external_call,
    machine,
    proc_entry_exit1,
)
from .temp import Label, name_map, new_label, new_temp
from .tree import (
    BinOp,
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
    RelOp,
    Seq,
    Stm,
    TempExp,
)


class Oper(Enum):
    """Operators of the source language."""

    PLUS = 0
    MINUS = 1
    TIMES = 2
    DIVIDE = 3
    EQ = 4
    NEQ = 5
    LT = 6
    LE = 7
    GT = 8
    GE = 9


_ARITH = {
    Oper.PLUS: BinOp.PLUS,
    Oper.MINUS: BinOp.MINUS,
    Oper.TIMES: BinOp.TIMES,
    Oper.DIVIDE: BinOp.DIVIDE,
}

_RELATIONAL = {
    Oper.EQ: RelOp.EQ,
    Oper.LT: RelOp.LT,
    Oper.LE: RelOp.LE,
    Oper.GT: RelOp.GT,
    Oper.GE: RelOp.GE,
}

# A hole to fill in: a conditional jump and which of its labels is missing.
Patch = tuple[CJump, str]


@dataclass(eq=False)
class Ex:
    """A translated construct that yields a value."""

    exp: Exp


@dataclass(eq=False)
class Nx:
    """A translated construct that yields no value."""

    stm: Stm


@dataclass(eq=False)
class Cx:
    """A translated condition whose jump targets are still to be filled in."""

    stm: Stm
    trues: list[Patch] = field(default_factory=list)
    falses: list[Patch] = field(default_factory=list)


TrExp = Union[Ex, Nx, Cx]


def _patch(patches: Iterable[Patch], label: Label) -> None:
    for jump, attr in patches:
        setattr(jump, attr, label)


def _condition(jump: CJump) -> Cx:
    return Cx(jump, [(jump, "true_label")], [(jump, "false_label")])


def un_ex(e: TrExp) -> Exp:
    """Return ``e`` as an expression that computes its value."""
    if isinstance(e, Ex):
        return e.exp
    if isinstance(e, Cx):
        result = new_temp()
        true_label, false_label = new_label(), new_label()
        _patch(e.trues, true_label)
        _patch(e.falses, false_label)
        return ESeq(
            Move(TempExp(result), Const(1)),
            ESeq(
                e.stm,
                ESeq(
                    LabelStm(false_label),
                    ESeq(
                        Move(TempExp(result), Const(0)),
                        ESeq(LabelStm(true_label), TempExp(result)),
                    ),
                ),
            ),
        )
    if isinstance(e, Nx):
        return ESeq(e.stm, Const(0))
    raise TypeError(f"not a translated expression: {e!r}")


def un_nx(e: TrExp) -> Stm:
    """Return ``e`` as a statement whose value is discarded."""
    if isinstance(e, Ex):
        exp = e.exp
        if isinstance(exp, ESeq) and isinstance(exp.exp, Const) and exp.exp.value == 0:
            return exp.stm
        return ExpStm(exp)
    if isinstance(e, Nx):
        return e.stm
    if isinstance(e, Cx):
        return e.stm
    raise TypeError(f"not a translated expression: {e!r}")


def un_cx(e: TrExp) -> Cx:
    """Return ``e`` as a condition with open true and false targets."""
    if isinstance(e, Ex):
        return _condition(CJump(RelOp.NE, un_ex(e), Const(0)))
    if isinstance(e, Cx):
        return e
    if isinstance(e, Nx):
        raise ValueError("a statement without a value cannot be used as a condition")
    raise TypeError(f"not a translated expression: {e!r}")


@dataclass(eq=False)
class Level:
    """A nesting level of functions, with its frame and enclosing level."""

    frame: Optional[Frame]
    parent: Optional[Level]
    formals: list[Access] = field(default_factory=list)


@dataclass(eq=False)
class Access:
    """A variable together with the level that declared it."""

    level: Level
    access: FrameAccess


class Translator:
    """Builds IR trees and collects the fragments of a program."""

    def __init__(self) -> None:
        self.outermost = Level(None, None, [])
        self.frags: list[Union[StringFrag, ProcFrag]] = []
        self._ids = count(1)

    # Levels and variables

    def new_level(self, parent: Level, name: Label, escapes: Iterable[bool]) -> Level:
        """Create a level for a function; the static link is its first formal."""
        frame = Frame(name, [True, *escapes])
        level = Level(frame, parent)
        level.formals = [Access(level, acc) for acc in frame.formals[1:]]
        return level

    def alloc_local(self, level: Level, escape: bool) -> Access:
        """Allocate a local variable in the frame of ``level``."""
        if level.frame is None:
            raise ValueError("cannot allocate a local in the outermost level")
        return Access(level, level.frame.alloc_local(escape))

    @staticmethod
    def _static_link(level: Level) -> FrameAccess:
        if level.frame is None:
            raise ValueError("the outermost level has no static link")
        return level.frame.formals[0]

    def simple_var(self, access: Access, level: Level) -> Ex:
        """Read a variable, following static links up to its level."""
        exp: Exp = TempExp(machine().fp)
        current: Optional[Level] = level
        while current is not access.level:
            if current is None:
                raise ValueError("variable is not visible from this level")
            exp = access_exp(self._static_link(current), exp)
            current = current.parent
        return Ex(access_exp(access.access, exp))

    def field_var(self, rec: TrExp, index: int) -> Ex:
        """Read field number ``index`` of a record."""
        return Ex(Mem(BinOpExp(BinOp.PLUS, un_ex(rec), Const(index * WORD_SIZE))))

    def subscript_var(self, array: TrExp, index: TrExp) -> Ex:
        """Read an element of an array."""
        offset = BinOpExp(BinOp.TIMES, un_ex(index), Const(WORD_SIZE))
        return Ex(Mem(BinOpExp(BinOp.PLUS, un_ex(array), offset)))

    # Expressions

    def nil_exp(self) -> Ex:
        """The nil record."""
        return Ex(Const(0))

    def int_exp(self, value: int) -> Ex:
        """An integer literal."""
        return Ex(Const(value))

    def string_exp(self, text: str) -> Ex:
        """A string literal, stored as a fragment under a fresh label."""
        label = new_label()
        self.frags.append(StringFrag(label, text))
        return Ex(Name(label))

    def call_exp(
        self, label: Label, args: Sequence[TrExp], caller: Level, callee: Level
    ) -> Ex:
        """Call a function, passing a static link unless it is external."""
        arg_exps = [un_ex(arg) for arg in args]
        if callee is self.outermost:
            return Ex(Call(Name(label), arg_exps))
        link: Exp = TempExp(machine().fp)
        current: Optional[Level] = caller
        while current is not callee.parent:
            if current is None:
                raise ValueError("callee is not visible from the caller")
            link = access_exp(self._static_link(caller), link)
            current = current.parent
        return Ex(Call(Name(label), [link, *arg_exps]))

    def op_exp(self, op: Oper, left: TrExp, right: TrExp) -> TrExp:
        """Apply an arithmetic operator or build a comparison."""
        if op in _ARITH:
            return Ex(BinOpExp(_ARITH[op], un_ex(left), un_ex(right)))
        if op in _RELATIONAL:
            return _condition(CJump(_RELATIONAL[op], un_ex(left), un_ex(right)))
        raise ValueError(f"unsupported operator: {op!r}")

    def string_cmp(self, left: TrExp, right: TrExp) -> Ex:
        """Compare two strings for equality through the runtime."""
        return Ex(external_call("stringEqual", [un_ex(left), un_ex(right)]))

    def record_exp(self, fields: Sequence[TrExp]) -> Ex:
        """Allocate a record and initialise its fields in order."""
        record = new_temp()
        init: Optional[Stm] = None
        for index, value in reversed(list(enumerate(fields))):
            store = Move(
                Mem(BinOpExp(BinOp.PLUS, TempExp(record), Const(index * WORD_SIZE))),
                un_ex(value),
            )
            init = Seq(store, init if init is not None else ExpStm(Const(114)))
        alloc = Move(
            TempExp(record),
            external_call("allocRecord", [Const(len(fields) * WORD_SIZE)]),
        )
        return Ex(ESeq(Seq(alloc, init), TempExp(record)))

    def seq_exp(self, head: TrExp, tail: Optional[TrExp]) -> TrExp:
        """Run ``head`` for its effects, then yield the value of ``tail``."""
        if tail is None:
            return head
        return Ex(ESeq(un_nx(head), un_ex(tail)))

    def list_to_exp(self, exps: Sequence[TrExp]) -> Ex:
        """Run the expressions in order and yield the value of the last."""
        if not exps:
            raise ValueError("cannot join an empty list of expressions")
        result = un_ex(exps[0])
        for exp in exps[1:]:
            result = ESeq(un_nx(Ex(result)), un_ex(exp))
        return Ex(result)

    def assign_exp(self, var: TrExp, value: TrExp) -> Nx:
        """Store a value in a variable."""
        return Nx(Move(un_ex(var), un_ex(value)))

    def if_then_exp(self, cond: TrExp, then: TrExp) -> Nx:
        """Run ``then`` only when ``cond`` holds."""
        true_label, join = new_label(), new_label()
        cx = un_cx(cond)
        _patch(cx.trues, true_label)
        _patch(cx.falses, join)
        return Nx(
            Seq(cx.stm, Seq(LabelStm(true_label), Seq(un_nx(then), LabelStm(join))))
        )

    def if_then_else_exp(self, cond: TrExp, then: TrExp, orelse: TrExp) -> Ex:
        """Yield the value of ``then`` or ``orelse`` depending on ``cond``."""
        true_label, false_label, join = new_label(), new_label(), new_label()
        cx = un_cx(cond)
        _patch(cx.trues, true_label)
        _patch(cx.falses, false_label)
        value = new_temp()
        then_exp = un_ex(then)
        else_exp = un_ex(orelse)
        return Ex(
            ESeq(
                cx.stm,
                ESeq(
                    LabelStm(true_label),
                    ESeq(
                        Move(TempExp(value), then_exp),
                        ESeq(
                            Jump(Name(join), [join]),
                            ESeq(
                                LabelStm(false_label),
                                ESeq(
                                    Move(TempExp(value), else_exp),
                                    ESeq(
                                        Jump(Name(join), [join]),
                                        ESeq(LabelStm(join), TempExp(value)),
                                    ),
                                ),
                            ),
                        ),
                    ),
                ),
            )
        )

    def while_exp(self, cond: TrExp, body: TrExp, done: Label) -> Nx:
        """Loop over ``body`` while ``cond`` holds; ``done`` ends the loop."""
        test = new_label()
        loop_body = new_label()
        cx = un_cx(cond)
        _patch(cx.trues, loop_body)
        _patch(cx.falses, done)
        return Nx(
            Seq(
                LabelStm(test),
                Seq(
                    cx.stm,
                    Seq(
                        LabelStm(loop_body),
                        Seq(un_nx(body), Seq(Jump(Name(test), [test]), LabelStm(done))),
                    ),
                ),
            )
        )

    def for_exp(
        self,
        loop_var: Access,
        level: Level,
        lo: TrExp,
        hi: TrExp,
        body: TrExp,
        done: Label,
    ) -> Nx:
        """Run ``body`` for each value of ``loop_var`` from ``lo`` to ``hi``."""
        var = un_ex(self.simple_var(loop_var, level))
        limit = TempExp(new_temp())
        loop_body = new_label()
        return Nx(
            Seq(
                Move(var, un_ex(lo)),
                Seq(
                    Move(limit, un_ex(hi)),
                    Seq(
                        CJump(RelOp.GT, var, limit, done, loop_body),
                        Seq(
                            LabelStm(loop_body),
                            Seq(
                                un_nx(body),
                                Seq(
                                    Move(var, BinOpExp(BinOp.PLUS, var, Const(1))),
                                    Seq(
                                        CJump(RelOp.LE, var, limit, loop_body, done),
                                        LabelStm(done),
                                    ),
                                ),
                            ),
                        ),
                    ),
                ),
            )
        )

    def array_exp(self, size: TrExp, init: TrExp) -> Ex:
        """Allocate an array with every element set to ``init``."""
        array = TempExp(new_temp())
        call = external_call("initArray", [un_ex(size), un_ex(init)])
        return Ex(ESeq(Move(array, call), array))

    def break_exp(self, label: Label) -> Nx:
        """Leave the innermost loop by jumping to ``label``."""
        return Nx(Jump(Name(label), [label]))

    def var_dec(self, access: Access, init: TrExp) -> Nx:
        """Initialise a newly declared variable."""
        target = access_exp(access.access, TempExp(machine().fp))
        return Nx(Move(target, un_ex(init)))

    def no_op(self) -> Ex:
        """An expression that does nothing."""
        return Ex(Const(0))

    # Fragments

    def proc_entry_exit(self, level: Level, body: TrExp) -> None:
        """Finish a function body and record it as a procedure fragment."""
        if level.frame is None:
            raise ValueError("the outermost level has no frame")
        result = new_temp()
        shift = Seq(
            Move(TempExp(result), un_ex(body)),
            Move(TempExp(machine().rv), TempExp(result)),
        )
        self.frags.append(ProcFrag(proc_entry_exit1(level.frame, shift), level.frame))

    def format_ir_dot(self) -> str:
        """Render every fragment as a graph in the DOT language."""
        lines = ['digraph "IR Tree"{\n']
        for frag in self.frags:
            if isinstance(frag, StringFrag):
                lines.append(f'"{frag.label.name}: {frag.text}"\n')
            else:
                lines.extend(self._dot_stm(frag.body, 0))
        lines.append("}\n")
        return "".join(lines)

    def _dot_stm(self, stm: Optional[Stm], pid: int) -> Iterator[str]:
        if stm is None:
            return
        myid = next(self._ids)
        edge = f"{pid} -> {myid};\n"
        if isinstance(stm, Seq):
            yield f"{myid}[label=SEQ]\n"
            yield edge
            yield from self._dot_stm(stm.left, myid)
            yield from self._dot_stm(stm.right, myid)
        elif isinstance(stm, LabelStm):
            yield f'{myid}[label="LABEL {stm.label.name}"]\n'
            yield edge
        elif isinstance(stm, Jump):
            yield f"{myid}[label=JUMP]\n"
            yield edge
            yield from self._dot_exp(stm.exp, myid)
        elif isinstance(stm, CJump):
            if stm.true_label is None or stm.false_label is None:
                raise ValueError("conditional jump has unpatched labels")
            yield (
                f'{myid}[label="CJUMP {stm.op.name} {stm.true_label.name} '
                f'{stm.false_label.name}"];\n'
            )
            yield edge
            yield from self._dot_exp(stm.left, myid)
            yield from self._dot_exp(stm.right, myid)
        elif isinstance(stm, Move):
            yield f"{myid}[label=MOVE];\n"
            yield edge
            yield from self._dot_exp(stm.dst, myid)
            yield from self._dot_exp(stm.src, myid)
        elif isinstance(stm, ExpStm):
            yield f"{myid}[label=EXP];\n"
            yield edge
            yield from self._dot_exp(stm.exp, myid)
        else:
            raise TypeError(f"not an IR statement: {stm!r}")

    def _dot_exp(self, exp: Exp, pid: int) -> Iterator[str]:
        myid = next(self._ids)
        edge = f"{pid} -> {myid};\n"
        if isinstance(exp, BinOpExp):
            yield f'{myid}[label="BINOP {exp.op.name}"]\n'
            yield edge
            yield from self._dot_exp(exp.left, myid)
            yield from self._dot_exp(exp.right, myid)
        elif isinstance(exp, Mem):
            yield f'{myid}[label="MEM"]\n'
            yield edge
            yield from self._dot_exp(exp.addr, myid)
        elif isinstance(exp, TempExp):
            name = name_map().look(exp.temp)
            yield f'{myid}[label="TEMP t{name if name is not None else exp.temp.num}"]\n'
            yield edge
        elif isinstance(exp, ESeq):
            yield f'{myid}[label="ESEQ"]\n'
            yield edge
            yield from self._dot_stm(exp.stm, myid)
            yield from self._dot_exp(exp.exp, myid)
        elif isinstance(exp, Name):
            yield f'{myid}[label="NAME {exp.label.name}"]\n'
            yield edge
        elif isinstance(exp, Const):
            yield f'{myid}[label="CONST {exp.value}"]\n'
            yield edge
        elif isinstance(exp, Call):
            yield f'{myid}[label="CALL"]\n'
            yield edge
            yield from self._dot_exp(exp.fun, myid)
            for arg in exp.args:
                yield from self._dot_exp(arg, myid)
        else:
            raise TypeError(f"not an IR expression: {exp!r}")