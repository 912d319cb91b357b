import logging
from typing import Optional, Tuple
from skirmish.engine.engine import Engine
from skirmish.engine.model import Race
from skirmish.engine.outcome import Outcome
from .eventlog import EventLog
from .schemas import BattleSettings

logger = logging.getLogger(__name__)

class BattleRunner:
    """Drives an engine round by round and keeps its event history."""

    def __init__(self, engine: Engine, stop_on_loss: Optional[Race] = None):
        self.engine = engine
        self.stop_on_loss = stop_on_loss
        self.events = EventLog()
        self._watched = engine.registry.count(stop_on_loss) if stop_on_loss else 0
        self.aborted = False

    @classmethod
    def from_text(cls, text: str, settings: Optional[BattleSettings] = None,
                  stop_on_loss: Optional[Race] = None) -> "BattleRunner":
        settings = settings or BattleSettings()
        eng = Engine.from_text(text, hit_points=settings.hit_points, attack_power=settings.attack_power())
        return cls(eng, stop_on_loss=stop_on_loss)

    def lost_units(self) -> int:
        """Units of the watched race that have died so far."""
        if self.stop_on_loss is None:
            return 0
        return self._watched - self.engine.registry.count(self.stop_on_loss)

    def run(self, max_rounds: Optional[int] = None) -> Outcome:
        """Play until combat ends, max_rounds is hit, or the watched race loses a unit."""
        logger.info("Starting battle: %dx%d map, %d units",
                    self.engine.grid.width(), self.engine.grid.height(), len(self.engine.registry))
        while not self.engine.finished:
            if max_rounds is not None and self.engine.rounds >= max_rounds:
                logger.info("Stopping after %d rounds (limit reached)", self.engine.rounds)
                break
            evts = self.engine.step()
            self.events.append_many(evts)
            logger.debug("Round %d produced %d events", self.engine.rounds, len(evts))
            if self.lost_units():
                logger.info("%s lost a unit in round %d, aborting",
                            self.stop_on_loss.name, self.engine.rounds + 1)
                self.aborted = True
                break
        return self.engine.outcome()

def find_minimum_power(text: str, settings: Optional[BattleSettings] = None,
                       race: Race = Race.ELF) -> Optional[Tuple[int, Outcome]]:
    """Smallest attack power for race that wins without a single loss.

    Tries powers upward from the configured one. Returns None when even a
    power that kills in one hit cannot avoid losses.
    """
    settings = settings or BattleSettings()
    field_name = f"{race.name.lower()}_attack_power"
    power = getattr(settings, field_name)
    while True:
        trial = settings.model_copy(update={field_name: power})
        runner = BattleRunner.from_text(text, trial, stop_on_loss=race)
        outcome = runner.run(trial.max_rounds)
        if not runner.aborted and outcome.winner == race:
            logger.info("%s win flawlessly at attack power %d (score %d)", race.name, power, outcome.score)
            return power, outcome
        if power >= settings.hit_points:
            logger.info("%s cannot win without losses at any attack power", race.name)
            return None
        power += 1
