"""
Network — packet-switched Intcode processes with a NAT idle monitor.

Provides:
- Process table (one machine per network address)
- Scheduler (ready set, lowest address first, cooperative)
- Central delivery queue (per-destination FIFO)
- NAT: captures packets sent to its address and, whenever the whole
  network goes idle, re-sends the last one to address 0

Packet frame on a machine's output port: dest, x, y. A process with no
packets waiting is fed the idle filler value instead.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

from . import config
from .machine import IntcodeMachine, StepResult

logger = logging.getLogger(__name__)


class ProcessState(IntEnum):
    """Process status codes."""
    READY = 0
    SLEEP = 1
    HALT = 2


class NetworkError(RuntimeError):
    """The network reached a state it cannot make progress from."""


class UnknownAddress(NetworkError):
    """A packet was addressed to a process that does not exist."""


@dataclass
class Packet:
    dest: int
    x: int
    y: int

    @property
    def data(self) -> tuple[int, int]:
        return (self.x, self.y)


@dataclass
class Process:
    pid: int
    machine: IntcodeMachine
    state: ProcessState = ProcessState.READY
    queue: deque = field(default_factory=deque)


class Scheduler:
    """Ready set over process ids. Hands out the lowest ready pid first."""

    def __init__(self, n: int):
        self.ready = [True] * n

    def next(self) -> int | None:
        for pid, flag in enumerate(self.ready):
            if flag:
                self.ready[pid] = False
                return pid
        return None

    def wake(self, pid: int):
        self.ready[pid] = True

    def __len__(self) -> int:
        return sum(self.ready)


class Network:
    """
    A fixed set of processes, all running the same program.

    Usage:
        net = Network(program, size=50)
        x, y = net.run_until_nat()      # first packet sent to the NAT

        net = Network(program, size=50)
        y = net.run()                   # y the NAT delivers twice in a row
    """

    def __init__(self, program: Sequence[int],
                 size: int = config.DEFAULT_NETWORK_SIZE,
                 nat_address: int = config.NAT_ADDRESS,
                 idle_input: int = config.IDLE_INPUT):
        if 0 <= nat_address < size:
            raise ValueError(f"NAT address {nat_address} collides with a process")
        self.size = size
        self.nat_address = nat_address
        self.idle_input = idle_input

        self.processes: list[Process] = []
        for pid in range(size):
            machine = IntcodeMachine(program)
            machine.write_port([pid])      # network address
            self.processes.append(Process(pid, machine))

        self.scheduler = Scheduler(size)
        self.queue: deque[Packet] = deque()

        # NAT
        self.nat: Packet | None = None
        self.nat_history: list[int] = []

        # Statistics
        self.runs = 0
        self.delivered = 0
        self.captured = 0
        self.resent = 0

    # ========== Processes ==========

    def run_proc(self, pid: int):
        """Feed one process its queued packets (or the idle filler), run it, collect output."""
        proc = self.processes[pid]
        if proc.state == ProcessState.HALT:
            return

        machine = proc.machine
        if not proc.queue:
            machine.write_port([self.idle_input])
        else:
            while proc.queue:
                machine.write_port(proc.queue.popleft())

        self.runs += 1
        if machine.run() == StepResult.HALTED:
            proc.state = ProcessState.HALT
            logger.debug("process %d halted", pid)
        else:
            proc.state = ProcessState.SLEEP

        while True:
            frame = machine.read_exact(config.PACKET_WIDTH)
            if frame is None:
                break
            dest, x, y = frame
            self.queue.append(Packet(dest, x, y))

    def write_packet(self, packet: Packet):
        """Deliver a packet to its destination process and wake it."""
        if not 0 <= packet.dest < self.size:
            raise UnknownAddress(f"No process at address {packet.dest}")
        proc = self.processes[packet.dest]
        proc.queue.append(packet.data)
        self.delivered += 1
        if proc.state != ProcessState.HALT:
            proc.state = ProcessState.READY
            self.scheduler.wake(packet.dest)

    def idle(self) -> bool:
        return not self.queue and all(not p.queue for p in self.processes)

    # ========== Main loop ==========

    def _drain(self, stop_at_nat: bool = False) -> Packet | None:
        """Run ready processes until none remain, routing packets as they appear."""
        while True:
            pid = self.scheduler.next()
            if pid is None:
                return None
            self.run_proc(pid)
            while self.queue:
                packet = self.queue.popleft()
                if packet.dest == self.nat_address:
                    logger.info("NAT RECV: %s", packet.data)
                    self.nat = packet
                    self.captured += 1
                    if stop_at_nat:
                        return packet
                else:
                    self.write_packet(packet)

    def run_until_nat(self) -> tuple[int, int] | None:
        """Run until the first packet addressed to the NAT; return its (x, y)."""
        packet = self._drain(stop_at_nat=True)
        return packet.data if packet is not None else None

    def run(self) -> int:
        """
        Run until the NAT converges.

        Each time the network goes idle the NAT re-sends its last captured
        packet to address 0. The first y value sent twice in a row is the
        result.
        """
        while True:
            self._drain()

            if not self.idle():
                raise NetworkError(
                    "No process is ready but packets are still queued "
                    "(destination halted?)")
            if self.nat is None:
                raise NetworkError("Network is idle and the NAT has nothing to send")

            x, y = self.nat.data
            logger.info("NAT SEND: %s", (x, y))
            if len(self.nat_history) >= 2:
                self.nat_history.pop(0)
            self.nat_history.append(y)
            if len(self.nat_history) == 2 and self.nat_history[0] == self.nat_history[1]:
                return y

            self.resent += 1
            self.write_packet(Packet(0, x, y))

    # ========== Introspection ==========

    def stats(self) -> dict:
        return {
            "processes": self.size,
            "halted": sum(p.state == ProcessState.HALT for p in self.processes),
            "runs": self.runs,
            "delivered": self.delivered,
            "captured": self.captured,
            "resent": self.resent,
            "in_flight": len(self.queue),
        }
