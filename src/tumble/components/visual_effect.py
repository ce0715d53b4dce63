from dataclasses import dataclass


@dataclass(slots=True)
class VisualEffect:
    """Short-lived overlay such as a match contour or an explosion burst."""
    kind: str
    x: float
    y: float
    color_seed: str
    duration: float
    elapsed: float = 0.0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed / self.duration)
