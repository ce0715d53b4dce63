"""Replay configuration: board shape, fill mode and layout clamps.

Values come from code or from ``TUMBLE_*`` environment variables. Invalid
values fail fast with :class:`ConfigError` so a misconfigured client never
starts replaying.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Tuple

from tumble.constants import (
    DEFAULT_COLS,
    DEFAULT_ROWS,
    MAX_CELL_SIZE,
    MIN_CELL_SIZE,
    PREVIEW_SHAPES,
)
from tumble.errors import ConfigError


class FillMode(str, Enum):
    """How removed cells are replaced on the board."""
    REPLACE = "replace"
    CASCADE = "cascade"
    REEL_SPIN = "reel-spin"

    @classmethod
    def parse(cls, value: "str | FillMode") -> "FillMode":
        if isinstance(value, FillMode):
            return value
        text = str(value).strip().lower().replace("_", "-")
        # "rodillo" is the reel mode name used by existing operator configs.
        if text in ("rodillo", "reel", "reelspin"):
            return cls.REEL_SPIN
        try:
            return cls(text)
        except ValueError:
            raise ConfigError(f"Unknown fill mode: {value!r}") from None


@dataclass(frozen=True, slots=True)
class BoardShape:
    rows: int
    cols: int

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise ConfigError(f"Board shape must be at least 1x1, got {self.rows}x{self.cols}")

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def coordinates(self):
        """Yield every (row, col) in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield (row, col)


@dataclass(frozen=True, slots=True)
class ReplayConfig:
    board_shape: BoardShape = field(default_factory=lambda: BoardShape(DEFAULT_ROWS, DEFAULT_COLS))
    fill_mode: FillMode = FillMode.REPLACE
    min_cell_size: float = MIN_CELL_SIZE
    max_cell_size: float = MAX_CELL_SIZE
    preview_shapes: Dict[str, Tuple[int, int]] = field(default_factory=lambda: dict(PREVIEW_SHAPES))
    # Paytable palette, symbol -> "#rrggbb"; unnamed symbols use the default colors.
    symbol_colors: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.min_cell_size <= 0:
            raise ConfigError("min_cell_size must be positive")
        if self.max_cell_size < self.min_cell_size:
            raise ConfigError(
                f"max_cell_size ({self.max_cell_size}) is below min_cell_size ({self.min_cell_size})"
            )

    def with_overrides(self, **changes) -> "ReplayConfig":
        if "fill_mode" in changes and changes["fill_mode"] is not None:
            changes["fill_mode"] = FillMode.parse(changes["fill_mode"])
        if "board_shape" in changes and isinstance(changes["board_shape"], tuple):
            changes["board_shape"] = BoardShape(*changes["board_shape"])
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def preview_shape_for(self, mode: str | None) -> BoardShape:
        """Board shape to show before any outcome of ``mode`` has arrived."""
        if mode and mode in self.preview_shapes:
            rows, cols = self.preview_shapes[mode]
            return BoardShape(rows, cols)
        return self.board_shape

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReplayConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        rows = _int_env(env, "TUMBLE_BOARD_ROWS", defaults.board_shape.rows)
        cols = _int_env(env, "TUMBLE_BOARD_COLS", defaults.board_shape.cols)
        fill_mode = FillMode.parse(env.get("TUMBLE_FILL_MODE", defaults.fill_mode.value))
        min_cell = _float_env(env, "TUMBLE_MIN_CELL_SIZE", defaults.min_cell_size)
        max_cell = _float_env(env, "TUMBLE_MAX_CELL_SIZE", defaults.max_cell_size)
        return cls(
            board_shape=BoardShape(rows, cols),
            fill_mode=fill_mode,
            min_cell_size=min_cell,
            max_cell_size=max_cell,
            symbol_colors=_colors_env(env, "TUMBLE_SYMBOL_COLORS"),
        )


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def _colors_env(env: Mapping[str, str], key: str) -> Dict[str, str]:
    """Parse ``A=#ef4444,B=#f97316`` into a symbol palette."""
    raw = env.get(key)
    if not raw:
        return {}
    colors: Dict[str, str] = {}
    for entry in raw.split(","):
        if not entry.strip():
            continue
        symbol, sep, value = entry.partition("=")
        symbol, value = symbol.strip().upper(), value.strip()
        if not sep or not symbol or not value.startswith("#"):
            raise ConfigError(f"{key} entries must look like SYMBOL=#rrggbb, got {entry!r}")
        colors[symbol] = value
    return colors
