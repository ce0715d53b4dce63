from dataclasses import dataclass


@dataclass(slots=True)
class CellVisual:
    """Drawable cell; x/y are the top-left corner in canvas pixels (y down)."""
    symbol: str
    x: float
    y: float
    alpha: float = 1.0
    scale: float = 1.0
