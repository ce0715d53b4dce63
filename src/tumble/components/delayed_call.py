from dataclasses import dataclass
from typing import Callable, Optional

from tumble.components.sequence_run import SequenceRun


@dataclass(slots=True)
class DelayedCall:
    due: float
    seq: int
    callback: Callable[[], None]
    run: Optional[SequenceRun] = None
    label: str = ""
