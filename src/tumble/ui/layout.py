from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from tumble.config import BoardShape, ReplayConfig
from tumble.constants import (
    BOARD_TOP_OFFSET,
    CELL_GAP,
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    MIN_USABLE_EXTENT,
    PADDING_NARROW,
    PADDING_WIDE,
    WIDE_CONTAINER_THRESHOLD,
)


@dataclass(frozen=True, slots=True)
class Metrics:
    """Resolved board geometry in canvas pixels (origin top-left, y down)."""
    cell_size: float
    gap: float
    padding: float
    offset_x: float
    offset_y: float
    width: float
    height: float
    rows: int
    cols: int

    @property
    def pitch(self) -> float:
        return self.cell_size + self.gap

    @property
    def grid_width(self) -> float:
        return self.cols * self.cell_size + (self.cols - 1) * self.gap

    @property
    def grid_height(self) -> float:
        return self.rows * self.cell_size + (self.rows - 1) * self.gap


def compute_metrics(
    shape: BoardShape,
    container_size: Tuple[float, float],
    config: ReplayConfig | None = None,
) -> Metrics:
    """Fit ``shape`` into the container without cropping.

    The cell size is the smaller of the width- and height-constrained sizes,
    clamped to the configured range. Non-positive container sizes fall back
    to the default canvas.
    """
    config = config or ReplayConfig()
    width, height = container_size
    safe_width = width if width and width > 0 else DEFAULT_CONTAINER_WIDTH
    safe_height = height if height and height > 0 else DEFAULT_CONTAINER_HEIGHT
    rows, cols = shape.rows, shape.cols
    padding = PADDING_WIDE if safe_width >= WIDE_CONTAINER_THRESHOLD else PADDING_NARROW
    gap = CELL_GAP
    top = BOARD_TOP_OFFSET

    usable_w = max(MIN_USABLE_EXTENT, safe_width - padding * 2 - gap * (cols - 1))
    usable_h = max(MIN_USABLE_EXTENT, safe_height - top - padding * 2 - gap * (rows - 1))
    raw_cell = min(usable_w / cols, usable_h / rows)
    cell_size = min(config.max_cell_size, max(config.min_cell_size, raw_cell))

    canvas_w = padding * 2 + cols * cell_size + gap * (cols - 1)
    canvas_h = top + rows * cell_size + gap * (rows - 1) + padding
    grid_w = cols * cell_size + (cols - 1) * gap
    grid_h = rows * cell_size + (rows - 1) * gap
    offset_x = round((canvas_w - grid_w) / 2)
    offset_y = max(round((canvas_h - grid_h) / 2), top)
    return Metrics(
        cell_size=cell_size,
        gap=gap,
        padding=padding,
        offset_x=offset_x,
        offset_y=offset_y,
        width=canvas_w,
        height=canvas_h,
        rows=rows,
        cols=cols,
    )


def cell_position(metrics: Metrics, row: int, col: int) -> Tuple[float, float]:
    """Top-left corner of the cell at (row, col)."""
    return (
        metrics.offset_x + col * metrics.pitch,
        metrics.offset_y + row * metrics.pitch,
    )
