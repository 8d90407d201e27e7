"""Runtime support functions that compiled Tiger programs call."""

from __future__ import annotations

import sys
from typing import BinaryIO, Optional, TextIO

WORD_SIZE = 8


class TigerRuntimeError(Exception):
    """Raised when a runtime function is called with out-of-range arguments."""


def init_array(size: int, init: int) -> list[int]:
    """Return a new array of ``size`` elements, each set to ``init``."""
    if size < 0:
        raise TigerRuntimeError(f"initArray({size}) negative size")
    return [init] * size


def alloc_record(size: int) -> list[int]:
    """Return a zeroed record occupying ``size`` bytes, one slot per word."""
    if size < 0:
        raise TigerRuntimeError(f"allocRecord({size}) negative size")
    return [0] * -(-size // WORD_SIZE)


def string_equal(s: bytes, t: bytes) -> int:
    """Return 1 if the two strings are equal, else 0."""
    return int(s is t or s == t)


def tiger_print(s: bytes, out: Optional[TextIO] = None) -> None:
    """Write the characters of ``s``."""
    (out or sys.stdout).write(s.decode("latin-1"))


def tiger_printi(k: int, out: Optional[TextIO] = None) -> None:
    """Write an integer in decimal."""
    (out or sys.stdout).write(str(k))


def tiger_flush(out: Optional[TextIO] = None) -> None:
    """Flush the output stream."""
    (out or sys.stdout).flush()


def tiger_ord(s: bytes) -> int:
    """Return the code of the first character, or -1 for the empty string."""
    return s[0] if s else -1


def tiger_chr(i: int) -> bytes:
    """Return the one-character string with code ``i``."""
    if not 0 <= i < 256:
        raise TigerRuntimeError(f"chr({i}) out of range")
    return bytes([i])


def tiger_size(s: bytes) -> int:
    """Return the length of ``s``."""
    return len(s)


def substring(s: bytes, first: int, n: int) -> bytes:
    """Return the ``n`` characters of ``s`` starting at ``first``."""
    if first < 0 or first + n > len(s):
        raise TigerRuntimeError(f"substring([{len(s)}],{first},{n}) out of range")
    return s[first:first + n]


def concat(a: bytes, b: bytes) -> bytes:
    """Return ``a`` followed by ``b``."""
    if not a:
        return b
    if not b:
        return a
    return a + b


def tiger_not(i: int) -> int:
    """Return 1 if ``i`` is zero, else 0."""
    return int(not i)


def tiger_getchar(stream: Optional[BinaryIO] = None) -> bytes:
    """Read one character; return the empty string at end of input."""
    data = (stream or sys.stdin.buffer).read(1)
    if isinstance(data, str):
        data = data.encode("latin-1")
    return data or b""