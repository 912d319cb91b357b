from typing import Dict, Optional
from pydantic import BaseModel, Field
from skirmish.engine.model import DEFAULT_ATTACK_POWER, DEFAULT_HIT_POINTS, Race
from skirmish.engine.outcome import Outcome

class BattleSettings(BaseModel):
    """User-tunable battle parameters."""
    hit_points: int = Field(default=DEFAULT_HIT_POINTS, gt=0)
    goblin_attack_power: int = Field(default=DEFAULT_ATTACK_POWER, gt=0)
    elf_attack_power: int = Field(default=DEFAULT_ATTACK_POWER, gt=0)
    max_rounds: Optional[int] = Field(default=None, ge=0)

    def attack_power(self) -> Dict[Race, int]:
        return {Race.GOBLIN: self.goblin_attack_power, Race.ELF: self.elf_attack_power}

class BattleReport(BaseModel):
    """Battle result schema."""
    rounds: int
    hit_points: int
    score: int
    winner: Optional[str] = None
    survivors: Dict[str, int] = Field(default_factory=dict)
    elf_attack_power: int = DEFAULT_ATTACK_POWER

    @classmethod
    def from_outcome(cls, outcome: Outcome, settings: BattleSettings) -> "BattleReport":
        return cls(
            rounds=outcome.rounds,
            hit_points=outcome.hit_points,
            score=outcome.score,
            winner=outcome.winner.value if outcome.winner else None,
            survivors={race.value: n for race, n in outcome.survivors.items()},
            elf_attack_power=settings.elf_attack_power,
        )
