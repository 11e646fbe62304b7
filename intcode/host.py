"""
IntcodeHost — high-level interface to a single Intcode machine.

Provides program-text parsing, one-shot runs, and an ASCII console for
programs that talk in characters (one word per byte, newline-terminated
commands).
"""

from __future__ import annotations

import logging
from typing import Iterable

from .machine import IntcodeMachine, StepResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Program text
# ---------------------------------------------------------------------------

def parse_program(text: str) -> list[int]:
    """Parse a line of comma-separated integers. Surrounding whitespace is ignored."""
    text = text.strip()
    if not text:
        return []
    try:
        return [int(tok) for tok in text.split(",")]
    except ValueError as e:
        raise ValueError(f"Malformed program text: {e}") from None


def run_program(program: Iterable[int], inputs: Iterable[int] = ()) -> list[int]:
    """Run a program to completion on a fixed input and return its output."""
    machine = IntcodeMachine(program)
    machine.write_port(inputs)
    return machine.run_ready()


# ---------------------------------------------------------------------------
# ASCII
# ---------------------------------------------------------------------------

def encode_ascii(text: str) -> list[int]:
    return list(text.encode("utf-8"))


def decode_ascii(values: Iterable[int]) -> str:
    """Decode output words as UTF-8 bytes. Raises ValueError on anything else."""
    values = list(values)
    try:
        data = bytes(values)
    except ValueError:
        bad = next(v for v in values if not 0 <= v <= 0xFF)
        raise ValueError(f"Invalid byte {bad}") from None
    return data.decode("utf-8")


def split_ascii(values: Iterable[int]) -> tuple[str, list[int]]:
    """
    Split output into its leading text and whatever follows it.

    Programs that report a final numeric answer after a transcript emit
    it as a single word outside the byte range; that word and anything
    after it come back untouched. Bytes up to 0xFF stay in the text, so
    multi-byte UTF-8 characters survive.
    """
    values = list(values)
    for i, v in enumerate(values):
        if not 0 <= v <= 0xFF:
            return decode_ascii(values[:i]), values[i:]
    return decode_ascii(values), []


# ---------------------------------------------------------------------------
# Host
# ---------------------------------------------------------------------------

class IntcodeHost:
    """A machine plus its console buffers."""

    def __init__(self, program: Iterable[int] = (),
                 machine: IntcodeMachine | None = None):
        self.machine = machine if machine is not None else IntcodeMachine(program)
        self.transcript: list[str] = []

    @property
    def halted(self) -> bool:
        return self.machine.halted

    def send(self, values: Iterable[int]):
        self.machine.write_port(values)

    def send_line(self, text: str):
        """Feed one newline-terminated command."""
        logger.debug("> %s", text)
        self.machine.write_port(encode_ascii(text + "\n"))

    def send_lines(self, lines: Iterable[str]):
        for line in lines:
            self.send_line(line)

    def run(self) -> StepResult:
        return self.machine.run()

    def recv(self) -> list[int]:
        return self.machine.read_all()

    def recv_text(self) -> str:
        """Drain the output as text and keep it in the transcript."""
        text = decode_ascii(self.recv())
        self.transcript.append(text)
        return text

    def interact(self, line: str | None = None) -> tuple[StepResult, str]:
        """Optionally send a command, run, and return (result, text produced)."""
        if line is not None:
            self.send_line(line)
        result = self.run()
        return result, self.recv_text()

    def clone(self) -> IntcodeHost:
        twin = IntcodeHost(machine=self.machine.clone())
        twin.transcript = list(self.transcript)
        return twin
