"""Stack frames, machine registers and fragments for the x86-64 target."""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Union

from .temp import Label, Temp, TempMap, named_label, new_temp
from .tree import (
    BinOp,
    BinOpExp,
    Call,
    Const,
    Exp,
    Mem,
    Move,
    Name,
    Seq,
    Stm,
    TempExp,
)

WORD_SIZE = 8
PARAM_REGISTER_COUNT = 6


@dataclass(frozen=True)
class InFrame:
    """A variable stored in the frame at ``offset`` from the frame pointer."""

    offset: int


@dataclass(frozen=True)
class InReg:
    """A variable held in a temporary."""

    temp: Temp


Access = Union[InFrame, InReg]


@dataclass(frozen=True, eq=False)
class Machine:
    """The machine registers of the target and the names they print as."""

    rax: Temp
    rbx: Temp
    rcx: Temp
    rdx: Temp
    rdi: Temp
    rsi: Temp
    rbp: Temp
    rsp: Temp
    r8: Temp
    r9: Temp
    r10: Temp
    r11: Temp
    r12: Temp
    r13: Temp
    r14: Temp
    r15: Temp
    temp_map: TempMap = field(default_factory=TempMap)

    @classmethod
    def create(cls) -> Machine:
        """Allocate one temporary per register and name them."""
        names = (
            "rax", "rbx", "rcx", "rdx", "rdi", "rsi", "rbp", "rsp",
            "r8", "r9", "r10", "r11", "r12", "r13", "r14", "r15",
        )
        temps = {name: new_temp() for name in names}
        result = cls(**temps)
        for reg in result.registers:
            result.temp_map.enter(reg, "%" + result.register_name(reg))
        return result

    def register_name(self, reg: Temp) -> str:
        """Return the bare name of a register temporary."""
        for name in (
            "rax", "rbx", "rcx", "rdx", "rdi", "rsi", "rbp", "rsp",
            "r8", "r9", "r10", "r11", "r12", "r13", "r14", "r15",
        ):
            if getattr(self, name) is reg:
                return name
        raise ValueError(f"not a machine register: {reg!r}")

    @property
    def rv(self) -> Temp:
        """The register that holds return values."""
        return self.rax

    @property
    def fp(self) -> Temp:
        """The frame pointer."""
        return self.rbp

    @property
    def registers(self) -> list[Temp]:
        """Every machine register, in allocation order."""
        return [
            self.rax, self.rbx, self.rcx, self.rdx, self.rbp, self.rdi,
            self.rsi, self.rsp, self.r8, self.r9, self.r10, self.r11,
            self.r12, self.r13, self.r14, self.r15,
        ]

    @property
    def callee_saves(self) -> list[Temp]:
        """Registers a called procedure must preserve."""
        return [self.rbp, self.rbx, self.r12, self.r13, self.r14, self.r15]

    @property
    def caller_saves(self) -> list[Temp]:
        """Registers a call may overwrite."""
        return [
            self.rax, self.rcx, self.rdx, self.rdi, self.rsi, self.rsp,
            self.r8, self.r9, self.r10, self.r11,
        ]

    @property
    def param_registers(self) -> list[Temp]:
        """Registers that carry the first arguments, in order."""
        return [self.rdi, self.rsi, self.rdx, self.rcx, self.r8, self.r9]


@functools.lru_cache(maxsize=None)
def machine() -> Machine:
    """Return the target machine, creating its registers on first use."""
    return Machine.create()


class Frame:
    """The activation record of one procedure."""

    def __init__(self, name: Label, escapes: Iterable[bool]) -> None:
        self.name = name
        self.escapes = list(escapes)
        self.size = 0
        self.formals: list[Access] = [self._allocate(escape) for escape in self.escapes]
        self.locals: list[InFrame] = []

    def _allocate(self, escape: bool) -> Access:
        if escape:
            self.size += WORD_SIZE
            return InFrame(-self.size)
        return InReg(new_temp())

    def alloc_local(self, escape: bool) -> Access:
        """Allocate a local variable, in the frame if it escapes."""
        access = self._allocate(escape)
        if isinstance(access, InFrame):
            self.locals.append(access)
        return access

    def __repr__(self) -> str:
        return f"Frame({self.name.name!r}, size={self.size})"


def access_exp(access: Access, frame_ptr: Exp) -> Exp:
    """Return the tree expression that reads or writes ``access``."""
    if isinstance(access, InFrame):
        return Mem(BinOpExp(BinOp.PLUS, frame_ptr, Const(access.offset)))
    if isinstance(access, InReg):
        return TempExp(access.temp)
    raise TypeError(f"not a frame access: {access!r}")


@dataclass(eq=False)
class StringFrag:
    """A string literal placed under ``label``."""

    label: Label
    text: str


@dataclass(eq=False)
class ProcFrag:
    """The body of a procedure together with its frame."""

    body: Stm
    frame: Frame


def external_call(name: str, args: Iterable[Exp]) -> Exp:
    """Return a call to a runtime function outside the program."""
    return Call(Name(named_label(name)), list(args))


def proc_entry_exit1(frame: Frame, stm: Stm) -> Stm:
    """Prefix ``stm`` with moves of incoming arguments to their places.

    The first arguments arrive in the parameter registers; the rest are read
    from the caller's frame, above the return address and saved frame pointer.
    """
    regs = machine()
    params = iter(regs.param_registers)
    shift: Optional[Stm] = None
    for nth, access in enumerate(frame.formals):
        dst = access_exp(access, TempExp(regs.fp))
        reg = next(params, None)
        if reg is not None:
            src: Exp = TempExp(reg)
        else:
            offset = (nth - PARAM_REGISTER_COUNT + 2) * WORD_SIZE
            src = Mem(BinOpExp(BinOp.PLUS, TempExp(regs.fp), Const(offset)))
        move = Move(dst, src)
        shift = move if shift is None else Seq(shift, move)
    return stm if shift is None else Seq(shift, stm)