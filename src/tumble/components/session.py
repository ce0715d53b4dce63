from dataclasses import dataclass
from typing import Optional

from tumble.components.sequence_run import SequenceRun
from tumble.model.outcome import Outcome, PackOutcome


@dataclass(slots=True)
class Session:
    """Process-wide playback state (singleton component)."""
    outcome: Optional[Outcome] = None
    run: Optional[SequenceRun] = None
    pack: Optional[PackOutcome] = None
    ticket_index: Optional[int] = None
    runs_started: int = 0

    @property
    def accumulated_win(self) -> float:
        return self.run.accumulated_win if self.run is not None else 0.0
