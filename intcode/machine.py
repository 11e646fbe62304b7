"""
Intcode machine — fetch/decode/execute state machine with suspend-on-input.

Models the whole machine as a bundle of chips: a growable word Memory, the
program counter and relative-base Registers, and two FIFOs for the I/O
ports. The machine has exactly one suspension point: an input instruction
with nothing queued. It then reports BLOCKED and leaves all state untouched,
so a driver can feed more input and call run() again.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Iterable

from .chips import FIFO, Memory, Register
from .errors import (
    IntcodeError, InvalidOpcode, InvalidWriteTarget, InvalidAddress,
    MalformedInstructionBoundary,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Instruction set
# ---------------------------------------------------------------------------

OP_ADD    = 1
OP_MUL    = 2
OP_INPUT  = 3
OP_OUTPUT = 4
OP_JNZ    = 5
OP_JZ     = 6
OP_LT     = 7
OP_EQ     = 8
OP_ARB    = 9    # adjust relative base
OP_HALT   = 99

# opcode → (mnemonic, parameter count)
OPCODES: dict[int, tuple[str, int]] = {
    OP_ADD:    ("ADD", 3),
    OP_MUL:    ("MUL", 3),
    OP_INPUT:  ("IN", 1),
    OP_OUTPUT: ("OUT", 1),
    OP_JNZ:    ("JNZ", 2),
    OP_JZ:     ("JZ", 2),
    OP_LT:     ("LT", 3),
    OP_EQ:     ("EQ", 3),
    OP_ARB:    ("ARB", 1),
    OP_HALT:   ("HALT", 0),
}

MAX_PARAMS = 3


class Mode(IntEnum):
    """Parameter addressing modes."""
    POSITION = 0    # parameter is an address
    IMMEDIATE = 1   # parameter is the operand
    RELATIVE = 2    # parameter is an offset from the relative base


class StepResult(IntEnum):
    """Outcome of a single step (or of a run, which never returns CONTINUE)."""
    CONTINUE = 0
    BLOCKED = 1
    HALTED = 2


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class MachineBlocked(RuntimeError):
    """Raised by run_ready() when the program still wants input."""


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

def decode(word: int, address: int | None = None) -> tuple[Mode, Mode, Mode, int]:
    """
    Split an instruction word into (mode1, mode2, mode3, opcode).

    The low two decimal digits are the opcode; the next three digits are
    the modes of parameters 1, 2 and 3. Anything above that is ignored.
    """
    if word < 0:
        raise InvalidOpcode(f"Invalid instruction {word} at addr {address}",
                            address, word)
    opcode = word % 100
    rest = word // 100
    modes = []
    for _ in range(MAX_PARAMS):
        digit = rest % 10
        rest //= 10
        if digit not in Mode._value2member_map_:
            raise InvalidOpcode(
                f"Invalid mode {digit} in instruction {word} at addr {address}",
                address, word,
            )
        modes.append(Mode(digit))
    return (modes[0], modes[1], modes[2], opcode)


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------

class IntcodeMachine:
    """Intcode virtual machine with value semantics under clone()."""

    def __init__(self, program: Iterable[int] = ()):
        # --- Chips ---
        self.memory = Memory(program)

        # --- Registers ---
        self.pc = Register()
        self.relative_base = Register()

        # --- IO ---
        self.input = FIFO()
        self.output = FIFO()

        # --- Internal latches ---
        self._opcode = 0
        self._modes: tuple[Mode, Mode, Mode] = (Mode.POSITION,) * MAX_PARAMS
        self._halted = False

        # --- Counters ---
        self.steps = 0
        self.inputs_read = 0
        self.outputs_written = 0
        self.jumps_taken = 0

    # -------------------------------------------------------------------
    # Memory helpers
    # -------------------------------------------------------------------

    def read_at(self, addr: int) -> int:
        """Peek at a memory word. Addresses past the end read as 0."""
        if addr < 0:
            raise InvalidAddress(f"Trying to read addr {addr}", addr)
        return self.memory.read(addr)

    def write_at(self, addr: int, val: int):
        """Poke a memory word, growing memory as needed."""
        if addr < 0:
            raise InvalidAddress(f"Trying to write addr {addr}", addr, val)
        self.memory.write(addr, val)

    def _param_word(self, n: int) -> int:
        _, arity = OPCODES[self._opcode]
        if not 1 <= n <= arity:
            raise MalformedInstructionBoundary(
                f"Parameter {n} requested from {arity}-parameter opcode "
                f"{self._opcode} at addr {self.pc.value}",
                self.pc.value, self._opcode,
            )
        return self.memory.read(self.pc.value + n)

    def _param_addr(self, n: int) -> int:
        """Resolve parameter n to the address it refers to."""
        raw = self._param_word(n)
        mode = self._modes[n - 1]
        if mode == Mode.IMMEDIATE:
            raise InvalidWriteTarget(
                f"Immediate write not supported: opcode {self._opcode} "
                f"at {self.pc.value}",
                self.pc.value, self._opcode,
            )
        if mode == Mode.POSITION:
            addr = raw
        else:
            addr = self.relative_base.value + raw
        if addr < 0:
            raise InvalidAddress(
                f"Trying to access addr {addr} at {self.pc.value + n}",
                self.pc.value, addr,
            )
        return addr

    def _read_param(self, n: int) -> int:
        if self._modes[n - 1] == Mode.IMMEDIATE:
            return self._param_word(n)
        return self.memory.read(self._param_addr(n))

    def _write_param(self, n: int, val: int):
        self.memory.write(self._param_addr(n), val)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    @property
    def halted(self) -> bool:
        return self._halted

    def step(self) -> StepResult:
        """
        Execute one instruction.

        Returns CONTINUE, BLOCKED (input instruction with an empty input
        queue; nothing is changed) or HALTED. Malformed programs raise an
        IntcodeError subclass.
        """
        if self._halted:
            return StepResult.HALTED

        pc = self.pc.value
        try:
            return self._execute(pc)
        except IntcodeError as e:
            logger.error("Fatal at addr %d: %s", pc, e)
            raise

    def _execute(self, pc: int) -> StepResult:
        word = self.memory.read(pc)
        mode1, mode2, mode3, op = decode(word, pc)
        if op not in OPCODES:
            raise InvalidOpcode(f"Unknown instruction {op} at addr {pc}", pc, word)
        self._opcode = op
        self._modes = (mode1, mode2, mode3)

        if logger.isEnabledFor(logging.DEBUG):
            name, arity = OPCODES[op]
            operands = [self.memory.data[pc + i] if pc + i < len(self.memory) else 0
                        for i in range(1, arity + 1)]
            letters = "".join(m.name[0] for m in self._modes[:arity])
            logger.debug("%6d  %-4s %-3s %s", pc, name, letters, operands)

        if op == OP_HALT:
            self._halted = True
            return StepResult.HALTED

        if op in (OP_ADD, OP_MUL, OP_LT, OP_EQ):
            x = self._read_param(1)
            y = self._read_param(2)
            if op == OP_ADD:
                v = x + y
            elif op == OP_MUL:
                v = x * y
            elif op == OP_LT:
                v = 1 if x < y else 0
            else:
                v = 1 if x == y else 0
            self._write_param(3, v)
            self.pc.advance(4)

        elif op == OP_INPUT:
            if not self.input.ready():
                return StepResult.BLOCKED
            addr = self._param_addr(1)
            v = self.input.pop()
            logger.debug("Read input: %d", v)
            self.memory.write(addr, v)
            self.inputs_read += 1
            self.pc.advance(2)

        elif op == OP_OUTPUT:
            v = self._read_param(1)
            logger.debug("Write output: %d", v)
            self.output.push(v)
            self.outputs_written += 1
            self.pc.advance(2)

        elif op in (OP_JNZ, OP_JZ):
            x = self._read_param(1)
            target = self._read_param(2)
            jump = (x != 0) if op == OP_JNZ else (x == 0)
            if jump:
                if target < 0:
                    raise InvalidAddress(
                        f"Jump to addr {target} at {pc}", pc, target)
                logger.debug("Jump to %d", target)
                self.pc.load(target)
                self.jumps_taken += 1
            else:
                self.pc.advance(3)

        elif op == OP_ARB:
            offset = self._read_param(1)
            base = self.relative_base.value + offset
            if base < 0:
                raise InvalidAddress(
                    f"Cannot set relative base {self.relative_base.value}"
                    f"+{offset} at addr {pc + 1}",
                    pc, base,
                )
            self.relative_base.load(base)
            self.pc.advance(2)

        self.steps += 1
        return StepResult.CONTINUE

    def run(self) -> StepResult:
        """Step until the machine halts or blocks on input."""
        while True:
            result = self.step()
            if result != StepResult.CONTINUE:
                return result

    def run_ready(self) -> list[int]:
        """Run a program that must finish on its current input; return its output."""
        if self.run() != StepResult.HALTED:
            raise MachineBlocked(
                f"Program is pending on input at addr {self.pc.value}")
        return self.read_all()

    # -------------------------------------------------------------------
    # IO ports
    # -------------------------------------------------------------------

    def write_port(self, values: Iterable[int]):
        """Append values to the input queue, in order."""
        self.input.extend(values)

    def read_port(self) -> int | None:
        """Pop one output value, if any."""
        return self.output.pop()

    def read_exact(self, n: int) -> list[int] | None:
        """Pop exactly n output values, or leave the queue alone and return None."""
        return self.output.pop_exact(n)

    def read_all(self) -> list[int]:
        """Drain the output queue."""
        return self.output.drain()

    # -------------------------------------------------------------------
    # Forking
    # -------------------------------------------------------------------

    def clone(self) -> IntcodeMachine:
        """Deep, independent copy: memory, registers, queues and counters."""
        twin = IntcodeMachine()
        twin.memory = self.memory.copy()
        twin.pc.load(self.pc.value)
        twin.relative_base.load(self.relative_base.value)
        twin.input = self.input.copy()
        twin.output = self.output.copy()
        twin._halted = self._halted
        twin.steps = self.steps
        twin.inputs_read = self.inputs_read
        twin.outputs_written = self.outputs_written
        twin.jumps_taken = self.jumps_taken
        return twin

    def __deepcopy__(self, memo) -> IntcodeMachine:
        return self.clone()

    # -------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------

    def snapshot(self) -> dict:
        return {
            "pc": self.pc.value,
            "relative_base": self.relative_base.value,
            "halted": self._halted,
            "memory_size": len(self.memory),
            "input_depth": len(self.input),
            "output_depth": len(self.output),
        }

    def reset_counters(self):
        self.steps = 0
        self.inputs_read = 0
        self.outputs_written = 0
        self.jumps_taken = 0
        self.memory.reads = 0
        self.memory.writes = 0

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "inputs_read": self.inputs_read,
            "outputs_written": self.outputs_written,
            "jumps_taken": self.jumps_taken,
            "memory_reads": self.memory.reads,
            "memory_writes": self.memory.writes,
            "memory_size": len(self.memory),
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"IO: {s['inputs_read']} in / {s['outputs_written']} out\n"
            f"Jumps taken: {s['jumps_taken']}\n"
            f"Memory: {s['memory_reads']}R/{s['memory_writes']}W "
            f"({s['memory_size']} words)"
        )

    def __repr__(self) -> str:
        state = "halted" if self._halted else f"pc={self.pc.value}"
        return (f"IntcodeMachine({state}, rb={self.relative_base.value}, "
                f"in={len(self.input)}, out={len(self.output)})")
