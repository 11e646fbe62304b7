"""
INTCODE

A small virtual machine for the Intcode instruction set, and the drivers
built on it.

Components:
- IntcodeMachine: memory + registers + I/O ports; suspends on empty input
- IntcodeHost: program text, one-shot runs, ASCII console
- Circuit: machines chained output-to-input, optionally in a feedback loop
- Network: packet-switched processes with a NAT idle monitor
- explore: fork-and-explore search over cloned machine state
- GridScanner: one-probe-per-run programs scanned into numpy arrays
"""

from .machine import (
    IntcodeMachine, StepResult, Mode, decode,
    IntcodeError, InvalidOpcode, InvalidWriteTarget, InvalidAddress,
    MalformedInstructionBoundary, MachineBlocked,
)
from .host import IntcodeHost, parse_program, run_program, encode_ascii, decode_ascii
from .pipeline import Circuit, PipelineStalled, max_signal
from .network import Network, NetworkError, UnknownAddress
from .explore import Move, explore, flood_fill, fork, ExplorationError
from .scanner import GridScanner, scan_grid, to_grid
from .config import configure_logging

__all__ = [
    'IntcodeMachine',
    'StepResult',
    'Mode',
    'decode',
    'IntcodeError',
    'InvalidOpcode',
    'InvalidWriteTarget',
    'InvalidAddress',
    'MalformedInstructionBoundary',
    'MachineBlocked',
    'IntcodeHost',
    'parse_program',
    'run_program',
    'encode_ascii',
    'decode_ascii',
    'Circuit',
    'PipelineStalled',
    'max_signal',
    'Network',
    'NetworkError',
    'UnknownAddress',
    'Move',
    'explore',
    'flood_fill',
    'fork',
    'ExplorationError',
    'GridScanner',
    'scan_grid',
    'to_grid',
    'configure_logging',
]
