"""Tests for the grid scanner."""

from __future__ import annotations

import numpy as np
import pytest

from intcode.scanner import GridScanner, query, scan_grid, to_grid

# Reads x and y, prints x == y.
DIAG = [3, 100, 3, 101, 8, 100, 101, 102, 4, 102, 99]


def test_scan_grid():
    field = scan_grid(DIAG, 3, 3)
    assert field.dtype == bool
    assert np.array_equal(field, np.eye(3, dtype=bool))


def test_scan_offset_and_count():
    scanner = GridScanner(DIAG)
    field = scanner.scan(2, 3, x0=1, y0=0)
    assert field.shape == (3, 2)
    # [y, x] with x starting at 1
    assert field[1, 0] and field[2, 1]
    assert int(field.sum()) == 2
    assert scanner.probes == 6


def test_query():
    assert query(DIAG, 2, 2) == 1
    assert query(DIAG, 2, 3) == 0


def test_probe_rejects_non_bits():
    with pytest.raises(ValueError):
        GridScanner([104, 5, 99]).probe(0, 0)
    with pytest.raises(ValueError):
        GridScanner([99]).query(0, 0)


def test_to_grid():
    grid, origin = to_grid({(-1, 0): 1, (1, 2): 2})
    assert grid.shape == (3, 3)
    assert origin == (-1, 0)
    assert grid[0, 0] == 1
    assert grid[2, 2] == 2
    assert grid[1, 1] == -1

    empty, origin = to_grid({})
    assert empty.shape == (0, 0)
