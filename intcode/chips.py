"""
Chip primitives for the Intcode machine.

Models the storage components the machine is wired from: a growable word
Memory, clocked Registers, and the unbounded FIFOs behind the I/O ports.
"""

from __future__ import annotations

import collections
from typing import Iterable

from .errors import InvalidAddress


class Memory:
    """
    Zero-initialized word store with an unbounded address space.

    Backed by a contiguous list. Reads past the end return 0; writes past
    the end grow the list with zeros up to and including the address.
    The length only ever grows. Negative addresses raise InvalidAddress.
    """

    def __init__(self, words: Iterable[int] = ()):
        self.data: list[int] = list(words)
        self.reads = 0
        self.writes = 0

    def read(self, addr: int) -> int:
        if addr < 0:
            raise InvalidAddress(f"Trying to read addr {addr}", value=addr)
        self.reads += 1
        if addr < len(self.data):
            return self.data[addr]
        return 0

    def write(self, addr: int, val: int):
        if addr < 0:
            raise InvalidAddress(f"Trying to write addr {addr}", value=addr)
        self.writes += 1
        if addr >= len(self.data):
            self.data.extend([0] * (addr + 1 - len(self.data)))
        self.data[addr] = val

    def snapshot(self) -> list[int]:
        return list(self.data)

    def copy(self) -> Memory:
        clone = Memory(self.data)
        clone.reads = self.reads
        clone.writes = self.writes
        return clone

    def __len__(self) -> int:
        return len(self.data)


class Register:
    """Unbounded clocked register. Words are Python ints, so no width mask."""

    def __init__(self, value: int = 0):
        self.value = value

    def load(self, val: int):
        self.value = val

    def advance(self, n: int):
        self.value += n


class FIFO:
    """I/O port buffer. Unlike a UART FIFO it has no depth limit."""

    def __init__(self, values: Iterable[int] = ()):
        self.buffer: collections.deque[int] = collections.deque(values)

    def push(self, val: int):
        self.buffer.append(val)

    def extend(self, values: Iterable[int]):
        self.buffer.extend(values)

    def pop(self) -> int | None:
        return self.buffer.popleft() if self.buffer else None

    def pop_exact(self, n: int) -> list[int] | None:
        """Pop exactly n values, or nothing at all if fewer are queued."""
        if n > len(self.buffer):
            return None
        return [self.buffer.popleft() for _ in range(n)]

    def drain(self) -> list[int]:
        out = list(self.buffer)
        self.buffer.clear()
        return out

    def ready(self) -> bool:
        return len(self.buffer) > 0

    def copy(self) -> FIFO:
        return FIFO(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)

    def __iter__(self):
        return iter(self.buffer)
