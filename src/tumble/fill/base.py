from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence, Set, Tuple

from tumble.components.grid_state import GridState, Position
from tumble.components.sequence_run import SequenceRun
from tumble.config import BoardShape
from tumble.constants import MIN_SETTLE
from tumble.events.bus import EventBus
from tumble.rendering.cell_renderer import CellRenderer
from tumble.systems.scheduler import TimerSystem
from tumble.ui.layout import Metrics, cell_position

logger = logging.getLogger("tumble.fill")


@dataclass(slots=True)
class FillContext:
    """Everything a fill strategy touches during one run."""
    renderer: CellRenderer
    scheduler: TimerSystem
    event_bus: EventBus
    grid: GridState
    shape: BoardShape
    run: SequenceRun
    metrics: Callable[[], Metrics]


class FillStrategy(ABC):
    """Decides how removed cells are replaced and how long each phase takes.

    Strategies update ``GridState`` as soon as a refill starts; the visuals
    catch up over the returned duration.
    """

    name: str = ""

    def __init__(self, ctx: FillContext):
        self.ctx = ctx

    @abstractmethod
    def intro_duration(self, grid: Sequence[Sequence[str]], shape: BoardShape) -> float:
        """Start the intro animation for the drawn board and return its length."""

    def apply_refill(
        self,
        removed: Set[Position],
        drop_in: Mapping[int, Tuple[str, ...]],
        grid_after: Sequence[Sequence[str]],
    ) -> float:
        if not removed:
            self.reconcile(grid_after)
            return MIN_SETTLE
        return self.refill(removed, drop_in, grid_after)

    @abstractmethod
    def refill(
        self,
        removed: Set[Position],
        drop_in: Mapping[int, Tuple[str, ...]],
        grid_after: Sequence[Sequence[str]],
    ) -> float:
        """Replace ``removed`` cells so the board shows ``grid_after``."""

    # helpers -----------------------------------------------------------

    def position(self, row: int, col: int) -> Tuple[float, float]:
        return cell_position(self.ctx.metrics(), row, col)

    def board_drop_height(self) -> float:
        metrics = self.ctx.metrics()
        return self.ctx.shape.rows * metrics.pitch

    def create(self, row: int, col: int, symbol: str) -> int:
        x, y = self.position(row, col)
        return self.ctx.renderer.create_cell_visual(symbol, x, y)

    def reconcile(self, grid_after: Sequence[Sequence[str]]) -> None:
        """Update changed symbols in place without touching handles."""
        grid = self.ctx.grid
        for row, col in self.ctx.shape.coordinates():
            target = grid_after[row][col]
            if grid.symbols[row][col] != target:
                handle = grid.handles.get((row, col))
                if handle is not None:
                    self.ctx.renderer.update_cell_visual(handle, target)
                grid.symbols[row][col] = target
