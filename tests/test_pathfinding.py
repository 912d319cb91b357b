"""Test distance fields, destination choice and path stepping."""
import numpy as np
from skirmish.engine.grid import parse_battlefield
from skirmish.engine.model import Race
from skirmish.engine.pathfinding import (
    UNREACHABLE, choose_destination, distance_field, next_step, shortest_path,
)
from skirmish.engine.registry import Registry

U = UNREACHABLE


def make_battle(*rows: str):
    grid, spawns = parse_battlefield("\n".join(rows))
    return grid, Registry.from_spawns(grid, spawns)


def test_distance_field():
    """BFS counts steps over free cells; walls and units stay unreachable."""
    grid, reg = make_battle(
        "#######",
        "#.E#.G#",
        "#..#..#",
        "#.....#",
        "#######",
    )
    field = distance_field(grid, reg, (1, 1))
    expected = np.array([
        [U, U, U, U, U, U, U],
        [U, 0, U, U, 7, U, U],
        [U, 1, 2, U, 6, 7, U],
        [U, 2, 3, 4, 5, 6, U],
        [U, U, U, U, U, U, U],
    ], dtype=np.int64)
    np.testing.assert_array_equal(field, expected)


def test_distance_field_is_monotone():
    """Every reachable cell past the first ring has a neighbour one step closer."""
    grid, reg = make_battle(
        "#########",
        "#G......#",
        "#.E.#...#",
        "#..##..G#",
        "#...##..#",
        "#...#...#",
        "#.G...G.#",
        "#.....G.#",
        "#########",
    )
    source = (2, 2)
    field = distance_field(grid, reg, source)
    for r in range(grid.height()):
        for c in range(grid.width()):
            d = field[r, c]
            if d == U or d <= 1:
                continue
            assert any(field[n] == d - 1 for n in grid.neighbors((r, c)))
    for n in reg.free_neighbors(source):
        assert field[n] == 1


def test_shortest_path():
    """The walk takes the first neighbour in reading order among equals."""
    grid, reg = make_battle(
        "#######",
        "#.E#.G#",
        "#..#..#",
        "#.....#",
        "#######",
    )
    path = shortest_path(grid, reg, (1, 5), (1, 1))
    assert path == [(1, 4), (2, 4), (3, 4), (3, 3), (3, 2), (2, 2), (2, 1), (1, 1)]

    goblin = reg.get((1, 5))
    assert next_step(grid, reg, goblin) == (1, 4)


def test_destination_tie_break():
    """Equally near destinations are broken by reading order."""
    grid, reg = make_battle(
        "#######",
        "#E..G.#",
        "#...#.#",
        "#.G.#G#",
        "#######",
    )
    elf = reg.get((1, 1))
    field = distance_field(grid, reg, elf.pos)
    candidates = reg.free_cells_around(Race.GOBLIN)
    # (1, 3), (2, 2) and (3, 1) are all two steps away
    assert choose_destination(field, candidates) == (1, 3)
    assert next_step(grid, reg, elf) == (1, 2)


def test_step_tie_break():
    """Two equally short first steps: the one first in reading order wins."""
    grid, reg = make_battle(
        "#######",
        "#.E...#",
        "#.....#",
        "#...G.#",
        "#######",
    )
    elf = reg.get((1, 2))
    field = distance_field(grid, reg, elf.pos)
    assert choose_destination(field, reg.free_cells_around(Race.GOBLIN)) == (2, 4)
    # right (1, 3) and down (2, 2) are both two steps from (2, 4)
    assert next_step(grid, reg, elf) == (1, 3)


def test_unreachable_enemy_is_no_op():
    """Walled-off units have nowhere to go."""
    grid, reg = make_battle(
        "#####",
        "#E#G#",
        "#####",
    )
    elf = reg.get((1, 1))
    field = distance_field(grid, reg, elf.pos)
    assert choose_destination(field, reg.free_cells_around(Race.GOBLIN)) is None
    assert next_step(grid, reg, elf) is None


def test_blocked_by_friends_is_no_op():
    """Cells behind a wall of allies are not reachable."""
    grid, reg = make_battle(
        "#######",
        "#E.E..#",
        "#E#####",
        "#.G...#",
        "#######",
    )
    elf = reg.get((1, 3))
    # the only way down is through (2, 1), where another elf stands
    assert next_step(grid, reg, elf) is None
