"""
Fork-and-explore — search over alternative futures of a machine.

The driver keeps a frontier of (state, machine) branches. Expanding a
branch clones its machine once per candidate move, feeds the move's input,
runs the clone until it blocks, and classifies the output. Only productive
moves are kept. Clones share nothing, so sibling branches cannot disturb
one another and no checkpoint/rollback is needed.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Hashable, Iterable, Sequence

from .machine import IntcodeMachine, StepResult

logger = logging.getLogger(__name__)


class Move(IntEnum):
    """Classification of one forked step."""
    BLOCKED = 0     # wall / rejected; the branch is dropped
    MOVED = 1       # productive; the branch joins the frontier
    GOAL = 2        # productive and the target


class ExplorationError(RuntimeError):
    """A forked machine did something the search cannot interpret."""


@dataclass
class Branch:
    state: Hashable
    machine: IntcodeMachine
    distance: int = 0
    move: Move = Move.MOVED


@dataclass
class SearchResult:
    goal: Branch | None
    visited: dict[Hashable, int] = field(default_factory=dict)

    @property
    def max_distance(self) -> int:
        return max(self.visited.values(), default=0)


Expand = Callable[[Hashable], Iterable[tuple[Hashable, Sequence[int]]]]
Classify = Callable[[list[int]], Move]


def fork(machine: IntcodeMachine, values: Sequence[int]) -> tuple[IntcodeMachine, StepResult]:
    """Clone, feed values, and run the clone. The original is left alone."""
    clone = machine.clone()
    clone.write_port(values)
    return clone, clone.run()


def explore(machine: IntcodeMachine, start: Hashable, expand: Expand,
            classify: Classify, stop_at_goal: bool = True,
            priority: Callable[[Hashable, int], Any] | None = None) -> SearchResult:
    """
    Search outward from `start`.

    expand(state) yields (next_state, input) candidates; classify(output)
    maps what a forked machine printed to a Move. A state is revisited
    only when reached by a strictly shorter path. Breadth-first unless a
    priority(state, distance) key is given, in which case the lowest key
    is expanded first and a goal is accepted when it is popped, so an
    admissible heuristic still yields a shortest path.
    """
    visited: dict[Hashable, int] = {start: 0}
    root = Branch(start, machine, 0)

    tie = itertools.count()
    if priority is None:
        frontier: Any = deque([root])
        push = frontier.append
        pop = frontier.popleft
    else:
        frontier = [(priority(start, 0), next(tie), root)]
        push = lambda b: heapq.heappush(frontier, (priority(b.state, b.distance), next(tie), b))
        pop = lambda: heapq.heappop(frontier)[2]

    goal: Branch | None = None
    while frontier:
        branch = pop()
        if branch.distance > visited.get(branch.state, branch.distance):
            continue    # superseded by a shorter path
        if priority is not None and branch.move == Move.GOAL and goal is None:
            # best-first: a goal is final only once no cheaper branch remains
            goal = branch
            if stop_at_goal:
                return SearchResult(goal, visited)
        for nxt, values in expand(branch.state):
            dist = branch.distance + 1
            if dist >= visited.get(nxt, dist + 1):
                continue

            clone, result = fork(branch.machine, values)
            output = clone.read_all()
            if not output:
                raise ExplorationError(
                    f"No output moving {branch.state!r} -> {nxt!r} ({result.name})")

            move = classify(output)
            logger.debug("%r -> %r: %s", branch.state, nxt, move.name)
            if move == Move.BLOCKED:
                continue

            child = Branch(nxt, clone, dist, move)
            visited[nxt] = dist
            if priority is None and move == Move.GOAL and goal is None:
                goal = child
                if stop_at_goal:
                    return SearchResult(goal, visited)
            push(child)

    return SearchResult(goal, visited)


def flood_fill(machine: IntcodeMachine, start: Hashable, expand: Expand,
               classify: Classify) -> int:
    """Explore every reachable state; return the largest distance from `start`."""
    return explore(machine, start, expand, classify, stop_at_goal=False).max_distance


def grid_moves(directions: Sequence[tuple[int, int]]) -> Expand:
    """
    Build an expand() for a robot on a 2D grid.

    directions[i] is the (dx, dy) step taken when the machine is fed i + 1.
    """
    def expand(state):
        x, y = state
        for i, (dx, dy) in enumerate(directions):
            yield (x + dx, y + dy), [i + 1]
    return expand


def status_code(output: list[int]) -> Move:
    """Classify a single status word: 0 blocked, 1 moved, 2 goal."""
    code = output[-1]
    if code not in Move._value2member_map_:
        raise ExplorationError(f"Unexpected status {code}")
    return Move(code)
