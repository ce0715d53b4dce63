from dataclasses import dataclass

from tumble.ui.layout import Metrics


@dataclass(slots=True)
class LayoutState:
    """Last container size seen and the metrics resolved from it."""
    container_width: float
    container_height: float
    metrics: Metrics
