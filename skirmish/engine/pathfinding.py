"""Breadth-first distance fields and shortest-path stepping on the battle grid.

Every query recomputes its field from scratch against the current registry.
This is the hot path of a battle (roughly units x grid area per round); a
cache keyed on the set of occupied cells would be the next step if maps grow.
"""
from collections import deque
from typing import Iterable, List, Optional
import numpy as np
from .grid import Grid
from .model import Position, Unit
from .registry import Registry

UNREACHABLE = np.iinfo(np.int64).max

def distance_field(grid: Grid, registry: Registry, source: Position) -> np.ndarray:
    """Step counts from source to every free cell reachable from it.

    The source itself is 0 even when occupied; walls, occupied cells and
    cells cut off from the source stay UNREACHABLE.
    """
    field = np.full((grid.height(), grid.width()), UNREACHABLE, dtype=np.int64)
    field[source] = 0
    queue = deque()
    for nxt in registry.free_neighbors(source):
        field[nxt] = 1
        queue.append(nxt)

    while queue:
        cur = queue.popleft()
        d = field[cur] + 1
        for nxt in registry.free_neighbors(cur):
            if field[nxt] == UNREACHABLE:
                field[nxt] = d
                queue.append(nxt)
    return field

def choose_destination(field: np.ndarray, candidates: Iterable[Position]) -> Optional[Position]:
    """Nearest reachable candidate; ties go to the first in reading order."""
    best: Optional[Position] = None
    best_d = UNREACHABLE
    for pos in sorted(candidates):
        d = field[pos]
        if d < best_d:
            best, best_d = pos, d
    return best

def shortest_path(grid: Grid, registry: Registry, source: Position,
                  destination: Position) -> Optional[List[Position]]:
    """Cells from source (exclusive) to destination (inclusive).

    Walks downhill on a field rooted at the destination, taking the first
    neighbour in reading order among equally close ones. None when the walk
    gets stuck before arriving.
    """
    field = distance_field(grid, registry, destination)
    path: List[Position] = []
    on_path = set()
    current = source
    while current != destination:
        best: Optional[Position] = None
        best_d = UNREACHABLE
        for nxt in registry.free_neighbors(current):
            if nxt in on_path:
                continue
            if field[nxt] < best_d:
                best, best_d = nxt, field[nxt]
        if best is None:
            return None
        current = best
        path.append(current)
        on_path.add(current)
    return path

def next_step(grid: Grid, registry: Registry, unit: Unit) -> Optional[Position]:
    """Where unit should step this turn to close on the enemy, if anywhere."""
    field = distance_field(grid, registry, unit.pos)
    destination = choose_destination(field, registry.free_cells_around(unit.race.enemy))
    if destination is None:
        return None
    path = shortest_path(grid, registry, unit.pos, destination)
    return path[0] if path else None
