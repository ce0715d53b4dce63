from __future__ import annotations

from tumble.config import FillMode
from tumble.constants import (
    MIN_SETTLE,
    REPLACE_APPEAR_DURATION,
    REPLACE_INTRO_DURATION,
    REPLACE_INTRO_STEP,
)
from tumble.fill.base import FillStrategy


class ReplaceFill(FillStrategy):
    """Removed cells fade back in place with their new symbol."""

    name = FillMode.REPLACE.value

    def intro_duration(self, grid, shape):
        renderer = self.ctx.renderer
        order = list(shape.coordinates())
        for index, pos in enumerate(order):
            handle = self.ctx.grid.handles.get(pos)
            if handle is None:
                continue
            renderer.animate(
                handle,
                {"alpha": 1.0, "scale": 1.0},
                REPLACE_INTRO_DURATION,
                "back_out",
                delay=index * REPLACE_INTRO_STEP,
                start={"alpha": 0.0, "scale": 0.0},
                run=self.ctx.run,
            )
        if not order:
            return 0.0
        return (len(order) - 1) * REPLACE_INTRO_STEP + REPLACE_INTRO_DURATION

    def refill(self, removed, drop_in, grid_after):
        grid = self.ctx.grid
        renderer = self.ctx.renderer
        for row, col in sorted(removed):
            old = grid.handles.pop((row, col), None)
            if old is not None:
                renderer.destroy_visual(old)
            symbol = grid_after[row][col]
            handle = self.create(row, col, symbol)
            grid.handles[(row, col)] = handle
            grid.symbols[row][col] = symbol
            renderer.animate(
                handle,
                {"alpha": 1.0, "scale": 1.0},
                REPLACE_APPEAR_DURATION,
                "back_out",
                start={"alpha": 0.0, "scale": 0.6},
                run=self.ctx.run,
            )
        self.reconcile(grid_after)
        return REPLACE_APPEAR_DURATION + MIN_SETTLE
