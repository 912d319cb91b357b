from dataclasses import dataclass, field
from typing import Dict, Optional
from .model import Race
from .registry import Registry

@dataclass
class Outcome:
    """Result of a battle at the moment it was taken."""
    rounds: int
    hit_points: int
    winner: Optional[Race] = None
    survivors: Dict[Race, int] = field(default_factory=dict)

    @property
    def score(self) -> int:
        """Full rounds completed times the hit points still standing."""
        return self.rounds * self.hit_points

    @classmethod
    def of(cls, registry: Registry, rounds: int) -> "Outcome":
        races = registry.alive_races()
        winner = next(iter(races)) if len(races) == 1 else None
        return cls(rounds=rounds, hit_points=registry.total_hit_points(), winner=winner,
                   survivors={race: registry.count(race) for race in Race})
