from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from tumble.config import BoardShape

logger = logging.getLogger("tumble.grid")

Position = Tuple[int, int]
SymbolGrid = List[List[str]]


def empty_grid(shape: BoardShape) -> SymbolGrid:
    return [["" for _ in range(shape.cols)] for _ in range(shape.rows)]


def normalize_grid(grid: Sequence[Sequence[str]] | None, shape: BoardShape, *, label: str = "grid") -> SymbolGrid:
    """Clamp or pad ``grid`` to ``shape``; missing cells become ``""``."""
    source = list(grid) if grid else []
    mismatch = len(source) != shape.rows or any(len(row) != shape.cols for row in source)
    if mismatch and source:
        found_cols = sorted({len(row) for row in source})
        logger.warning(
            "%s is %dx%s, expected %dx%d; clamping/padding",
            label,
            len(source),
            "/".join(str(c) for c in found_cols),
            shape.rows,
            shape.cols,
        )
    normalized: SymbolGrid = []
    for row in range(shape.rows):
        src_row = source[row] if row < len(source) else ()
        normalized.append([str(src_row[col]) if col < len(src_row) else "" for col in range(shape.cols)])
    return normalized


def in_bounds_cells(cells: Iterable[Position], shape: BoardShape, *, label: str = "cells") -> Set[Position]:
    kept: Set[Position] = set()
    dropped: List[Position] = []
    for cell in cells:
        if shape.contains(cell[0], cell[1]):
            kept.add(cell)
        else:
            dropped.append(cell)
    if dropped:
        logger.warning("Ignoring out-of-range %s: %s", label, sorted(dropped))
    return kept


def in_range_drop_in(drop_in: Mapping[int, Sequence[str]], shape: BoardShape) -> Dict[int, Tuple[str, ...]]:
    kept: Dict[int, Tuple[str, ...]] = {}
    for col, symbols in drop_in.items():
        if 0 <= col < shape.cols:
            kept[col] = tuple(symbols)
        else:
            logger.warning("Ignoring dropIn for out-of-range column %d", col)
    return kept


def apply_gravity(
    grid: Sequence[Sequence[str]],
    removed: Set[Position],
    drop_in: Mapping[int, Sequence[str]],
    shape: BoardShape,
) -> SymbolGrid:
    """Board after removing ``removed``, compacting survivors down and dropping symbols in.

    Incoming symbols are consumed from the bottom of each column's list first.
    Slots left without a symbol stay ``""``.
    """
    result = empty_grid(shape)
    for col in range(shape.cols):
        write_row = shape.rows - 1
        for row in range(shape.rows - 1, -1, -1):
            if (row, col) in removed:
                continue
            result[write_row][col] = grid[row][col]
            write_row -= 1
        incoming = list(drop_in.get(col, ()))
        while incoming and write_row >= 0:
            result[write_row][col] = incoming.pop()
            write_row -= 1
    return result


def distinct_symbols(grid: Sequence[Sequence[str]]) -> List[str]:
    """Non-empty symbols in first-seen row-major order."""
    seen: Dict[str, None] = {}
    for row in grid:
        for symbol in row:
            cleaned = (symbol or "").strip().upper()
            if cleaned and cleaned not in seen:
                seen[cleaned] = None
    return list(seen)


def find_symbol_cells(grid: Sequence[Sequence[str]], symbol: str) -> List[Position]:
    return [
        (row, col)
        for row, values in enumerate(grid)
        for col, value in enumerate(values)
        if value == symbol
    ]
