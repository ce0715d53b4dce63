from dataclasses import dataclass
from typing import Callable, Dict, Optional

from tumble.components.sequence_run import SequenceRun


@dataclass(slots=True)
class Tween:
    """Interpolates CellVisual properties of ``target`` from ``start`` to ``end``.

    Nothing moves until ``delay`` seconds have elapsed.
    """
    target: int
    start: Dict[str, float]
    end: Dict[str, float]
    duration: float
    easing: Callable[[float], float]
    delay: float = 0.0
    elapsed: float = 0.0
    on_finish: Optional[Callable[[], None]] = None
    run: Optional[SequenceRun] = None

    @property
    def started(self) -> bool:
        return self.elapsed >= self.delay

    @property
    def progress(self) -> float:
        active = self.elapsed - self.delay
        if active <= 0:
            return 0.0 if self.duration > 0 or active < 0 else 1.0
        if self.duration <= 0:
            return 1.0
        return min(1.0, active / self.duration)
