from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple
from .grid import Grid
from .model import DEFAULT_ATTACK_POWER, DEFAULT_HIT_POINTS, Position, Race, Unit

class Registry:
    """Living units keyed by position.

    Units never reference each other; everything goes through position
    lookup here. Iteration is always in reading order.
    """

    def __init__(self, grid: Grid, units: Iterable[Unit] = ()):
        self.grid = grid
        self._units: Dict[Position, Unit] = {}
        for u in units:
            self.add(u)

    @classmethod
    def from_spawns(cls, grid: Grid, spawns: Iterable[Tuple[Position, Race]],
                    hit_points: int = DEFAULT_HIT_POINTS,
                    attack_power: Optional[Mapping[Race, int]] = None) -> "Registry":
        """Create one unit per spawn, numbered per race in reading order (G1, E1, ...)."""
        attack_power = attack_power or {}
        counters = {race: 0 for race in Race}
        reg = cls(grid)
        for pos, race in sorted(spawns):
            counters[race] += 1
            reg.add(Unit(id=f"{race.value}{counters[race]}", race=race, pos=pos,
                         hit_points=hit_points,
                         attack_power=attack_power.get(race, DEFAULT_ATTACK_POWER)))
        return reg

    def add(self, unit: Unit) -> None:
        if unit.pos in self._units:
            raise ValueError(f"Position {unit.pos} already occupied by {self._units[unit.pos].id}")
        self._units[unit.pos] = unit

    def remove(self, pos: Position) -> Unit:
        return self._units.pop(pos)

    def get(self, pos: Position) -> Optional[Unit]:
        return self._units.get(pos)

    def move(self, unit: Unit, to: Position) -> None:
        del self._units[unit.pos]
        unit.pos = to
        self._units[to] = unit

    def __contains__(self, pos: Position) -> bool:
        return pos in self._units

    def __len__(self) -> int:
        return len(self._units)

    def as_mapping(self) -> Mapping[Position, Unit]:
        return self._units

    def is_free(self, pos: Position) -> bool:
        """Open terrain with nobody standing on it."""
        return self.grid.is_open(pos) and pos not in self._units

    def free_neighbors(self, pos: Position) -> List[Position]:
        return [p for p in self.grid.neighbors(pos) if self.is_free(p)]

    def units(self, race: Optional[Race] = None) -> List[Unit]:
        """Living units in reading order, optionally of one race."""
        return [self._units[p] for p in sorted(self._units)
                if race is None or self._units[p].race == race]

    def count(self, race: Race) -> int:
        return sum(1 for u in self._units.values() if u.race == race)

    def alive_races(self) -> Set[Race]:
        return {u.race for u in self._units.values()}

    def free_cells_around(self, race: Race) -> List[Position]:
        """Free cells next to any unit of race, sorted and without duplicates."""
        cells: Set[Position] = set()
        for pos, u in self._units.items():
            if u.race == race:
                cells.update(self.free_neighbors(pos))
        return sorted(cells)

    def total_hit_points(self) -> int:
        return sum(u.hit_points for u in self._units.values())
