"""
Pipeline — chains of Intcode machines joined output-to-input.

Each stage is seeded with its own phase value; the first stage also gets
the start signal. A driver loop runs every stage that has fresh input,
then moves each stage's drained output into the next stage. In feedback
mode the last stage feeds the first, forming a cycle that ends only when
every stage has halted.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Sequence

from . import config
from .machine import IntcodeMachine, StepResult

logger = logging.getLogger(__name__)


class StageState(IntEnum):
    READY = 0       # has input it has not seen yet
    PENDING = 1     # blocked on input
    HALTED = 2


class PipelineStalled(RuntimeError):
    """Every live stage is waiting on input that nothing will produce."""


@dataclass
class Stage:
    phase: int
    machine: IntcodeMachine
    state: StageState = StageState.READY


@dataclass
class Circuit:
    """A pipeline of machines, optionally closed into a feedback loop."""

    stages: list[Stage]
    feedback: bool = False
    last_out: int | None = None
    handoffs: int = field(default=0, init=False)

    @classmethod
    def load(cls, program: Sequence[int], phases: Iterable[int],
             feedback: bool = False,
             start_signal: int = config.START_SIGNAL) -> Circuit:
        stages = []
        for phase in phases:
            machine = IntcodeMachine(program)
            machine.write_port([phase])
            stages.append(Stage(phase, machine))
        if not stages:
            raise ValueError("A circuit needs at least one stage")
        stages[0].machine.write_port([start_signal])
        return cls(stages, feedback)

    def _run_ready(self):
        """Run every READY stage until none is left."""
        while True:
            stage = next((s for s in self.stages if s.state == StageState.READY), None)
            if stage is None:
                return
            if stage.machine.run() == StepResult.HALTED:
                stage.state = StageState.HALTED
            else:
                stage.state = StageState.PENDING

    def _pipe(self):
        """Move each stage's output into the next stage's input."""
        self.handoffs += 1
        for src, dst in zip(self.stages, self.stages[1:]):
            out = src.machine.read_all()
            if out:
                dst.machine.write_port(out)
                if dst.state != StageState.HALTED:
                    dst.state = StageState.READY

        out = self.stages[-1].machine.read_all()
        if out:
            self.last_out = out[-1]
            if self.feedback:
                first = self.stages[0]
                first.machine.write_port(out)
                if first.state != StageState.HALTED:
                    first.state = StageState.READY
        logger.debug("handoff %d: %s, last_out=%s", self.handoffs,
                     [s.state.name for s in self.stages], self.last_out)

    def done(self) -> bool:
        return all(s.state == StageState.HALTED for s in self.stages)

    def run(self) -> int | None:
        """Run to overall halt; return the last value the last stage produced."""
        while True:
            self._run_ready()
            self._pipe()
            if self.done():
                return self.last_out
            if not any(s.state == StageState.READY for s in self.stages):
                raise PipelineStalled(
                    f"No stage can make progress: "
                    f"{[(s.phase, s.state.name) for s in self.stages]}")


def max_signal(program: Sequence[int], phases: Iterable[int],
               feedback: bool = False) -> tuple[int, tuple[int, ...]]:
    """Try every ordering of the phase values; return (best signal, ordering)."""
    best: tuple[int, tuple[int, ...]] | None = None
    for order in itertools.permutations(phases):
        signal = Circuit.load(program, order, feedback).run()
        if signal is None:
            continue
        if best is None or signal > best[0]:
            best = (signal, order)
    if best is None:
        raise PipelineStalled("No phase ordering produced a signal")
    logger.info("best phase order %s -> %d", best[1], best[0])
    return best
