"""
Grid scanner — probe a program over a 2D field, one fresh machine per cell.

Some programs answer a single question per run (is (x, y) inside the
field?) and halt. The scanner feeds each coordinate pair to a brand new
machine and packs the answers into a numpy array indexed [y, x].
"""

from __future__ import annotations

import logging
from typing import Hashable, Sequence

import numpy as np

from .machine import IntcodeMachine

logger = logging.getLogger(__name__)


class GridScanner:
    """Runs a program once per probe and counts how many probes it took."""

    def __init__(self, program: Sequence[int]):
        self.program = list(program)
        self.probes = 0

    def query(self, *inputs: int) -> int:
        """Run the program on `inputs` to completion; return its first output."""
        machine = IntcodeMachine(self.program)
        machine.write_port(inputs)
        out = machine.run_ready()
        self.probes += 1
        if not out:
            raise ValueError(f"Program produced no output for {inputs}")
        return out[0]

    def probe(self, x: int, y: int) -> bool:
        v = self.query(x, y)
        if v not in (0, 1):
            raise ValueError(f"Unexpected output {v} at ({x}, {y})")
        return bool(v)

    def scan(self, width: int, height: int, x0: int = 0, y0: int = 0) -> np.ndarray:
        """Probe the rectangle [x0, x0+width) × [y0, y0+height); result is [y, x]."""
        field = np.zeros((height, width), dtype=bool)
        for y in range(height):
            for x in range(width):
                field[y, x] = self.probe(x0 + x, y0 + y)
        logger.debug("scanned %dx%d at (%d, %d): %d set",
                     width, height, x0, y0, int(field.sum()))
        return field


def query(program: Sequence[int], *inputs: int) -> int:
    return GridScanner(program).query(*inputs)


def scan_grid(program: Sequence[int], width: int, height: int) -> np.ndarray:
    return GridScanner(program).scan(width, height)


def to_grid(cells: dict[Hashable, int], fill: int = -1) -> tuple[np.ndarray, tuple[int, int]]:
    """
    Pack a sparse {(x, y): value} map into a dense array indexed [y, x].

    Returns the array and the (x, y) coordinate of element [0, 0].
    """
    if not cells:
        return np.full((0, 0), fill, dtype=np.int64), (0, 0)
    xs = [x for x, _ in cells]
    ys = [y for _, y in cells]
    min_x, min_y = min(xs), min(ys)
    grid = np.full((max(ys) - min_y + 1, max(xs) - min_x + 1), fill, dtype=np.int64)
    for (x, y), v in cells.items():
        grid[y - min_y, x - min_x] = v
    return grid, (min_x, min_y)
