from dataclasses import dataclass, field
from typing import Dict, Tuple
from enum import Enum

Position = Tuple[int, int]  # (row, col); tuple order is reading order

DEFAULT_HIT_POINTS = 200
DEFAULT_ATTACK_POWER = 3

class Terrain(Enum):
    """Static cell type"""
    WALL = "#"
    OPEN = "."

class Race(Enum):
    """Faction a unit fights for"""
    GOBLIN = "G"
    ELF = "E"

    @property
    def enemy(self) -> "Race":
        return Race.ELF if self is Race.GOBLIN else Race.GOBLIN

@dataclass
class Unit:
    id: str
    race: Race
    pos: Position
    hit_points: int = DEFAULT_HIT_POINTS
    attack_power: int = DEFAULT_ATTACK_POWER

    def is_alive(self) -> bool:
        return self.hit_points > 0

    def attack(self, target: "Unit") -> int:
        """Hit target, flooring its hit points at zero. Returns damage dealt."""
        dmg = min(self.attack_power, target.hit_points)
        target.hit_points -= dmg
        return dmg

@dataclass
class Event:
    kind: str
    round: int
    data: Dict = field(default_factory=dict)
