"""Symbol colors and the shading helpers used to build cell fills."""
from __future__ import annotations

import zlib
from typing import Dict, Tuple

RGB = Tuple[int, int, int]

EMPTY_CELL_COLOR = "#64748b"

# Default symbol palette; a paytable may supply its own colors.
SYMBOL_COLORS: Dict[str, str] = {
    "A": "#ef4444",
    "B": "#f97316",
    "C": "#f59e0b",
    "D": "#eab308",
    "E": "#84cc16",
    "F": "#22c55e",
    "G": "#10b981",
    "H": "#14b8a6",
    "I": "#06b6d4",
    "J": "#0ea5e9",
    "K": "#3b82f6",
    "L": "#6366f1",
    "M": "#8b5cf6",
    "N": "#fde047",
    "O": "#ec4899",
}


def hex_to_rgb(value: str) -> RGB:
    safe = value.replace("#", "")
    if len(safe) == 3:
        safe = "".join(c + c for c in safe)
    safe = safe[:6].ljust(6, "0")
    try:
        num = int(safe, 16)
    except ValueError:
        num = 0
    return (num >> 16) & 0xFF, (num >> 8) & 0xFF, num & 0xFF


def _clamp(channel: float) -> int:
    return max(0, min(255, round(channel)))


def darken(rgb: RGB, amount: float) -> RGB:
    factor = 1.0 - amount
    return tuple(_clamp(c * factor) for c in rgb)  # type: ignore[return-value]


def lighten(rgb: RGB, amount: float) -> RGB:
    return tuple(_clamp(c + (255 - c) * amount) for c in rgb)  # type: ignore[return-value]


def symbol_color(symbol: str, overrides: Dict[str, str] | None = None) -> str:
    if not symbol:
        return EMPTY_CELL_COLOR
    if overrides and symbol in overrides:
        return overrides[symbol]
    if symbol in SYMBOL_COLORS:
        return SYMBOL_COLORS[symbol]
    # Unknown symbols get a stable color derived from their name.
    palette = list(SYMBOL_COLORS.values())
    return palette[zlib.crc32(symbol.encode("utf-8")) % len(palette)]


def cell_fills(symbol: str, *, metallic: bool, overrides: Dict[str, str] | None = None) -> Dict[str, RGB]:
    """Base, glow, highlight and shade fills for a cell showing ``symbol``."""
    rgb = hex_to_rgb(symbol_color(symbol, overrides))
    if metallic:
        return {
            "base": darken(rgb, 0.64),
            "glow": lighten(rgb, 0.24),
            "highlight": lighten(rgb, 0.36),
            "shade": darken(rgb, 0.82),
        }
    return {
        "base": darken(rgb, 0.74),
        "glow": darken(rgb, 0.55),
        "highlight": lighten(rgb, 0.2),
        "shade": darken(rgb, 0.76),
    }
