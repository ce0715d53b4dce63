from __future__ import annotations

from typing import Dict, Type

from tumble.config import FillMode
from tumble.fill.base import FillContext, FillStrategy
from tumble.fill.cascade import CascadeFill
from tumble.fill.reel_spin import ReelSpinFill
from tumble.fill.replace import ReplaceFill

_registry: Dict[FillMode, Type[FillStrategy]] = {
    FillMode.REPLACE: ReplaceFill,
    FillMode.CASCADE: CascadeFill,
    FillMode.REEL_SPIN: ReelSpinFill,
}


def register_fill_strategy(mode: FillMode, strategy: Type[FillStrategy]) -> None:
    """Register (or replace) the strategy used for ``mode``."""

    _registry[mode] = strategy


def create_fill_strategy(mode: "FillMode | str", ctx: FillContext) -> FillStrategy:
    strategy_cls = _registry[FillMode.parse(mode)]
    return strategy_cls(ctx)
