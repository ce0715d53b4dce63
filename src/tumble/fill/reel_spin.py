from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set

from tumble.config import FillMode
from tumble.constants import (
    FALLBACK_STRIP_SYMBOLS,
    REEL_COLUMN_START_DELAY,
    REEL_DROP_DURATION,
    REEL_MIN_TURNS_LAST_COLUMN,
    REEL_SETTLE_DURATION,
    REEL_SPIN_TICK,
    REEL_STOP_DELAY,
    REEL_STRIP_MIN_LENGTH,
    REEL_WOBBLE,
)
from tumble.events.bus import EVENT_REEL_COLUMN_STOPPED
from tumble.fill.base import FillStrategy
from tumble.utils.grid_ops import distinct_symbols

logger = logging.getLogger("tumble.fill")


def build_reel_strip(grid: Sequence[Sequence[str]]) -> List[str]:
    """Symbols the reels cycle through while spinning.

    Distinct symbols of ``grid`` in first-seen row-major order, repeated until
    the strip is long enough. An empty grid uses the fallback alphabet.
    """
    base = distinct_symbols(grid) or list(FALLBACK_STRIP_SYMBOLS)
    strip = list(base)
    while len(strip) < REEL_STRIP_MIN_LENGTH:
        strip.extend(base)
    return strip


def min_spin_ticks(rows: int) -> int:
    return rows * REEL_MIN_TURNS_LAST_COLUMN


@dataclass
class _Spin:
    """Bookkeeping for one spin of a set of columns."""
    columns: List[int]
    final: List[List[str]]
    strip: List[str]
    ticks: Dict[int, int] = field(default_factory=dict)
    stopped: Set[int] = field(default_factory=set)
    stopping: bool = False

    @property
    def last_column(self) -> int:
        return self.columns[-1]


class ReelSpinFill(FillStrategy):
    """Slot-machine style fill: columns spin a symbol strip and stop left to right."""

    name = FillMode.REEL_SPIN.value

    def intro_duration(self, grid, shape):
        renderer = self.ctx.renderer
        lift = self.board_drop_height()
        for (row, col), handle in self.ctx.grid.handles.items():
            _, y = self.position(row, col)
            renderer.animate(
                handle,
                {"y": y},
                REEL_DROP_DURATION,
                "cubic_out",
                delay=col * REEL_COLUMN_START_DELAY,
                start={"y": y - lift},
                run=self.ctx.run,
            )
        spin = _Spin(
            columns=list(range(shape.cols)),
            final=[list(row) for row in self.ctx.grid.symbols],
            strip=build_reel_strip(grid),
        )
        for col in spin.columns:
            self._start_column(spin, col, col * REEL_COLUMN_START_DELAY + REEL_DROP_DURATION)
        return (
            (shape.cols - 1) * REEL_COLUMN_START_DELAY
            + REEL_DROP_DURATION
            + min_spin_ticks(shape.rows) * REEL_SPIN_TICK
            + (shape.cols - 1) * REEL_STOP_DELAY
            + REEL_SETTLE_DURATION
        )

    def refill(self, removed, drop_in, grid_after):
        grid = self.ctx.grid
        renderer = self.ctx.renderer
        columns = sorted({col for _, col in removed})
        strip = build_reel_strip(grid.symbols)
        for row, col in sorted(removed):
            old = grid.handles.pop((row, col), None)
            if old is not None:
                renderer.destroy_visual(old)
            grid.handles[(row, col)] = self.create(row, col, strip[row % len(strip)])
        # Columns that keep spinning snap to grid_after when they stop; the rest change in place.
        for row, col in self.ctx.shape.coordinates():
            if col in columns:
                grid.symbols[row][col] = grid_after[row][col]
        self.reconcile(grid_after)
        spin = _Spin(columns=columns, final=[list(row) for row in grid_after], strip=strip)
        for col in columns:
            self._start_column(spin, col, 0.0)
        return (
            min_spin_ticks(self.ctx.shape.rows) * REEL_SPIN_TICK
            + (len(columns) - 1) * REEL_STOP_DELAY
            + REEL_SETTLE_DURATION
        )

    # spinning ----------------------------------------------------------

    def _start_column(self, spin: _Spin, col: int, delay: float) -> None:
        spin.ticks[col] = 0
        self.ctx.scheduler.schedule(
            delay + REEL_SPIN_TICK,
            lambda: self._tick(spin, col),
            run=self.ctx.run,
            label=f"reel-tick-{col}",
        )

    def _tick(self, spin: _Spin, col: int) -> None:
        if col in spin.stopped:
            return
        spin.ticks[col] += 1
        ticks = spin.ticks[col]
        renderer = self.ctx.renderer
        strip = spin.strip
        offset = col * 3
        for row in range(self.ctx.shape.rows):
            handle = self.ctx.grid.handles.get((row, col))
            if handle is None:
                continue
            renderer.update_cell_visual(handle, strip[(offset + row - ticks) % len(strip)])
            _, y = self.position(row, col)
            renderer.animate(
                handle, {"y": y}, REEL_SPIN_TICK, "linear", start={"y": y - REEL_WOBBLE}, run=self.ctx.run
            )
        if col == spin.last_column and not spin.stopping and ticks >= min_spin_ticks(self.ctx.shape.rows):
            spin.stopping = True
            for rank, stop_col in enumerate(spin.columns):
                self.ctx.scheduler.schedule(
                    rank * REEL_STOP_DELAY,
                    lambda stop_col=stop_col: self._stop(spin, stop_col),
                    run=self.ctx.run,
                    label=f"reel-stop-{stop_col}",
                )
        self.ctx.scheduler.schedule(
            REEL_SPIN_TICK, lambda: self._tick(spin, col), run=self.ctx.run, label=f"reel-tick-{col}"
        )

    def _stop(self, spin: _Spin, col: int) -> None:
        spin.stopped.add(col)
        renderer = self.ctx.renderer
        for row in range(self.ctx.shape.rows):
            handle = self.ctx.grid.handles.get((row, col))
            if handle is None:
                continue
            renderer.update_cell_visual(handle, spin.final[row][col])
            _, y = self.position(row, col)
            renderer.animate(
                handle,
                {"y": y},
                REEL_SETTLE_DURATION,
                "back_out",
                start={"y": y + REEL_WOBBLE * 4},
                run=self.ctx.run,
            )
        spin_ticks = spin.ticks[col]
        logger.debug("Reel column %d stopped after %d ticks", col, spin_ticks)
        self.ctx.event_bus.emit(EVENT_REEL_COLUMN_STOPPED, col=col, spin_ticks=spin_ticks)
