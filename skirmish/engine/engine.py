import logging
from typing import List, Mapping, Optional
from .grid import Grid, parse_battlefield
from .model import DEFAULT_HIT_POINTS, Event, Race, Unit
from .outcome import Outcome
from .pathfinding import next_step
from .registry import Registry

logger = logging.getLogger(__name__)

class Engine:
    """Pure, deterministic round-based battle engine."""

    def __init__(self, grid: Grid, registry: Registry):
        self.grid = grid
        self.registry = registry
        self.rounds = 0
        self.finished = False

    @classmethod
    def from_text(cls, text: str, hit_points: int = DEFAULT_HIT_POINTS,
                  attack_power: Optional[Mapping[Race, int]] = None) -> "Engine":
        """Parse a map and set up the battle. Raises ParseError on bad input."""
        grid, spawns = parse_battlefield(text)
        registry = Registry.from_spawns(grid, spawns, hit_points=hit_points, attack_power=attack_power)
        return cls(grid, registry)

    def is_over(self) -> bool:
        """Combat ends once fewer than two races are left standing."""
        return len(self.registry.alive_races()) <= 1

    def adjacent_target(self, unit: Unit) -> Optional[Unit]:
        """Weakest adjacent enemy; ties go to the first in reading order."""
        best: Optional[Unit] = None
        for pos in self.grid.neighbors(unit.pos):
            other = self.registry.get(pos)
            if other is None or other.race != unit.race.enemy:
                continue
            if best is None or other.hit_points < best.hit_points:
                best = other
        return best

    def _attack(self, unit: Unit, target: Unit) -> List[Event]:
        dmg = unit.attack(target)
        rnd = self.rounds + 1
        evts = [Event("Attack", rnd, {"attacker": unit.id, "target": target.id,
                                      "dmg": dmg, "hp": target.hit_points})]
        if not target.is_alive():
            self.registry.remove(target.pos)
            logger.debug("Round %d: %s killed %s at %s", rnd, unit.id, target.id, target.pos)
            evts.append(Event("UnitKilled", rnd, {"unit_id": target.id, "killer": unit.id,
                                                  "pos": list(target.pos)}))
        return evts

    def take_turn(self, unit: Unit) -> List[Event]:
        """Attack if an enemy is adjacent, else step toward one and then try to attack."""
        target = self.adjacent_target(unit)
        if target is not None:
            return self._attack(unit, target)

        step = next_step(self.grid, self.registry, unit)
        if step is None:
            return []

        src = unit.pos
        self.registry.move(unit, step)
        evts = [Event("UnitMoved", self.rounds + 1, {"unit_id": unit.id, "from": list(src), "to": list(step)})]
        target = self.adjacent_target(unit)
        if target is not None:
            evts += self._attack(unit, target)
        return evts

    def _finish(self) -> List[Event]:
        self.finished = True
        out = self.outcome()
        logger.info("Combat ended after %d full rounds with %d hit points left (winner: %s)",
                    out.rounds, out.hit_points, out.winner.name if out.winner else "none")
        return [Event("CombatEnded", self.rounds, {"rounds": out.rounds, "hit_points": out.hit_points,
                                                   "winner": out.winner.value if out.winner else None})]

    def step(self) -> List[Event]:
        """Play one round. Returns its events; the round only counts if nobody ran out of targets."""
        if self.finished:
            return []
        if self.is_over():
            return self._finish()

        evts: List[Event] = []
        # Snapshot identities, not positions: a unit that walks into a dead
        # unit's cell must not get that unit's turn.
        for unit in self.registry.units():
            if not unit.is_alive():
                continue
            if self.is_over():
                return evts + self._finish()
            evts += self.take_turn(unit)

        self.rounds += 1
        evts.append(Event("RoundCompleted", self.rounds, {"units": len(self.registry),
                                                          "hit_points": self.registry.total_hit_points()}))
        if self.is_over():
            evts += self._finish()
        return evts

    def run(self, max_rounds: Optional[int] = None) -> Outcome:
        """Step until combat ends or max_rounds full rounds have been played."""
        while not self.finished:
            if max_rounds is not None and self.rounds >= max_rounds:
                break
            self.step()
        return self.outcome()

    def total_hit_points(self) -> int:
        return self.registry.total_hit_points()

    def outcome(self) -> Outcome:
        return Outcome.of(self.registry, self.rounds)

    def render(self) -> str:
        return self.grid.render(self.registry.as_mapping())
