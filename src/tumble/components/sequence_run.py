from dataclasses import dataclass
from enum import Enum

from tumble.config import FillMode
from tumble.model.outcome import Outcome


class SequencePhase(Enum):
    IDLE = "idle"
    INTRO = "intro"
    HIGHLIGHT = "highlight"
    REMOVE = "remove"
    REFILL = "refill"
    DONE = "done"


@dataclass(slots=True)
class SequenceRun:
    """One playback of an outcome.

    Every delayed call and tween callback scheduled for the run holds a
    reference to it and checks ``cancelled`` before doing anything.
    """
    run_id: int
    outcome: Outcome
    fill_mode: FillMode
    cursor: int = -1
    accumulated_win: float = 0.0
    phase: SequencePhase = SequencePhase.IDLE
    cancelled: bool = False
    finished: bool = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.finished

    def cancel(self) -> None:
        self.cancelled = True
