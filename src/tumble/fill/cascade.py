from __future__ import annotations

import logging
from typing import Dict, List

from tumble.components.grid_state import Position
from tumble.config import FillMode
from tumble.constants import (
    CASCADE_DROP_DURATION,
    CASCADE_INTRO_COLUMN_DELAY,
    CASCADE_INTRO_DROP,
    CASCADE_REFILL_COLUMN_DELAY,
    MIN_SETTLE,
)
from tumble.fill.base import FillStrategy

logger = logging.getLogger("tumble.fill")


class CascadeFill(FillStrategy):
    """Gravity refill: survivors fall, new symbols drop in from above."""

    name = FillMode.CASCADE.value

    def intro_duration(self, grid, shape):
        renderer = self.ctx.renderer
        lift = self.board_drop_height()
        for (row, col), handle in self.ctx.grid.handles.items():
            _, y = self.position(row, col)
            renderer.animate(
                handle,
                {"y": y},
                CASCADE_INTRO_DROP,
                "cubic_out",
                delay=col * CASCADE_INTRO_COLUMN_DELAY,
                start={"y": y - lift},
                run=self.ctx.run,
            )
        return (shape.cols - 1) * CASCADE_INTRO_COLUMN_DELAY + CASCADE_INTRO_DROP

    def refill(self, removed, drop_in, grid_after):
        grid = self.ctx.grid
        renderer = self.ctx.renderer
        rows, cols = self.ctx.shape.rows, self.ctx.shape.cols
        lift = self.board_drop_height()
        new_handles: Dict[Position, int] = {}
        landed: List[List[str]] = [["" for _ in range(cols)] for _ in range(rows)]

        for col in range(cols):
            delay = col * CASCADE_REFILL_COLUMN_DELAY
            write_row = rows - 1
            for row in range(rows - 1, -1, -1):
                handle = grid.handles.get((row, col))
                if (row, col) in removed:
                    if handle is not None:
                        renderer.destroy_visual(handle)
                    continue
                landed[write_row][col] = grid.symbols[row][col]
                if handle is None:
                    handle = self.create(write_row, col, grid.symbols[row][col])
                elif write_row != row:
                    _, y = self.position(write_row, col)
                    renderer.animate(
                        handle, {"y": y}, CASCADE_DROP_DURATION, "cubic_out", delay=delay, run=self.ctx.run
                    )
                new_handles[(write_row, col)] = handle
                write_row -= 1

            # Incoming symbols fill the freed slots bottom-up from the end of the list.
            incoming = list(drop_in.get(col, ()))
            for row in range(write_row, -1, -1):
                symbol = incoming.pop() if incoming else grid_after[row][col]
                landed[row][col] = symbol
                handle = self.create(row, col, symbol)
                _, y = self.position(row, col)
                renderer.animate(
                    handle,
                    {"y": y},
                    CASCADE_DROP_DURATION,
                    "cubic_out",
                    delay=delay,
                    start={"y": y - lift},
                    run=self.ctx.run,
                )
                new_handles[(row, col)] = handle
            if incoming:
                logger.debug("Ignoring %d surplus dropIn symbols for column %d", len(incoming), col)

        grid.handles = new_handles
        grid.symbols = landed
        mismatched = [
            (row, col)
            for row, col in self.ctx.shape.coordinates()
            if landed[row][col] != grid_after[row][col]
        ]
        if mismatched:
            logger.warning("Gravity result disagrees with gridAfter at %s; correcting in place", mismatched)
            self.reconcile(grid_after)
        return (cols - 1) * CASCADE_REFILL_COLUMN_DELAY + CASCADE_DROP_DURATION + MIN_SETTLE
