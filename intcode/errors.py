"""
Fatal program defects.

Every error carries the instruction address it was raised at (when known)
and the offending value. Shared by the chips and the machine.
"""

from __future__ import annotations


class IntcodeError(Exception):
    """A defect in the program being run. Never recoverable."""

    def __init__(self, message: str, address: int | None = None,
                 value: int | None = None):
        super().__init__(message)
        self.address = address
        self.value = value


class InvalidOpcode(IntcodeError):
    """Unknown opcode, bad mode digit, or negative instruction word."""


class InvalidWriteTarget(IntcodeError):
    """An instruction tried to write through an immediate parameter."""


class InvalidAddress(IntcodeError):
    """A resolved address, jump target or relative base is negative."""


class MalformedInstructionBoundary(IntcodeError):
    """An operand beyond the instruction's declared width was requested."""
