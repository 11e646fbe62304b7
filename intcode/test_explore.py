"""Tests for fork-and-explore search."""

from __future__ import annotations

import pytest

from intcode.explore import (
    ExplorationError, Move, explore, flood_fill, fork, grid_moves, status_code,
)
from intcode.machine import IntcodeMachine, StepResult

# A robot in a corridor of cells 0..4, position kept at [100].
# Input 1 steps left, 2 steps right. Output 0 wall, 1 moved, 2 reached cell 4.
CORRIDOR = [
    3, 101,
    1008, 101, 1, 102,
    1006, 102, 16,
    1001, 100, -1, 103,     # left
    1105, 1, 20,
    1001, 100, 1, 103,      # 16: right
    1007, 103, 0, 104,      # 20: bounds check
    1005, 104, 50,
    1007, 103, 5, 104,
    1006, 104, 50,
    1001, 103, 0, 100,      # commit
    1008, 100, 4, 104,
    1005, 104, 56,
    104, 1,
    1105, 1, 0,
    104, 0,                 # 50: wall
    1105, 1, 0,
    0,
    104, 2,                 # 56: goal
    1105, 1, 0,
]


def corridor_moves(state):
    yield state - 1, [1]
    yield state + 1, [2]


def test_fork_leaves_original():
    vm = IntcodeMachine(CORRIDOR)
    clone, result = fork(vm, [2])
    assert result == StepResult.BLOCKED
    assert clone.read_all() == [1]
    assert clone.read_at(100) == 1
    assert vm.read_at(100) == 0
    assert vm.pc.value == 0


def test_explore_finds_goal():
    vm = IntcodeMachine(CORRIDOR)
    found = explore(vm, 0, corridor_moves, status_code)
    assert found.goal is not None
    assert found.goal.state == 4
    assert found.goal.distance == 4
    assert found.goal.machine.read_at(100) == 4
    assert -1 not in found.visited
    assert vm.read_at(100) == 0


def test_explore_with_priority():
    vm = IntcodeMachine(CORRIDOR)
    found = explore(vm, 0, corridor_moves, status_code,
                    priority=lambda state, dist: (dist, -state))
    assert found.goal.state == 4
    assert found.goal.distance == 4


def test_flood_fill():
    vm = IntcodeMachine(CORRIDOR)
    assert flood_fill(vm, 0, corridor_moves, status_code) == 4

    goal = explore(vm, 0, corridor_moves, status_code).goal
    full = explore(goal.machine, 4, corridor_moves, status_code, stop_at_goal=False)
    assert full.visited == {4: 0, 3: 1, 2: 2, 1: 3, 0: 4}
    assert full.max_distance == 4


def test_silent_fork():
    # reads a move and prints nothing
    with pytest.raises(ExplorationError):
        explore(IntcodeMachine([3, 10, 1105, 1, 0]), 0, corridor_moves, status_code)


def test_status_code():
    assert status_code([0]) == Move.BLOCKED
    assert status_code([1]) == Move.MOVED
    assert status_code([7, 2]) == Move.GOAL
    with pytest.raises(ExplorationError):
        status_code([3])


def test_grid_moves():
    expand = grid_moves([(0, -1), (0, 1), (-1, 0), (1, 0)])
    assert list(expand((2, 2))) == [
        ((2, 1), [1]), ((2, 3), [2]), ((1, 2), [3]), ((3, 2), [4]),
    ]


# Prints back whatever it is fed, so the status of each move comes from the test.
ECHO = [3, 10, 4, 10, 1105, 1, 0]

# A -> C -> D -> G is one step longer than A -> B -> G.
DETOUR = {"A": ["C", "B"], "C": ["D"], "D": ["G"], "B": ["G"], "G": []}
HEURISTIC = {"A": 0, "B": 1, "C": 0, "D": 0, "G": 0}


def detour_moves(state):
    for nxt in DETOUR[state]:
        yield nxt, [2 if nxt == "G" else 1]


def test_best_first_returns_shortest_goal():
    # deeper branches win ties, so D is expanded before B
    found = explore(IntcodeMachine(ECHO), "A", detour_moves, status_code,
                    priority=lambda state, dist: (dist + HEURISTIC[state], -dist))
    assert found.goal.state == "G"
    assert found.goal.distance == 2
    assert found.visited["G"] == 2
