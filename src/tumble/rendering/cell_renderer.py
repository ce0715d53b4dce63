"""Rendering collaborator used by the sequencer and the fill strategies.

Handles are esper entities carrying a :class:`CellVisual`. Every operation
ignores handles that are missing or already destroyed.
"""
from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional, Protocol

from esper import World

from tumble.components.cell_visual import CellVisual
from tumble.components.sequence_run import SequenceRun
from tumble.components.tween import Tween
from tumble.components.visual_effect import VisualEffect
from tumble.constants import (
    BONUS_PULSE_DURATION,
    EXPLOSION_DURATION,
    MATCH_CONTOUR_DURATION,
)
from tumble.utils.easing import Easing, resolve_easing

EFFECT_DURATIONS: Dict[str, float] = {
    "contour": MATCH_CONTOUR_DURATION,
    "explosion": EXPLOSION_DURATION,
    "bonus_pulse": BONUS_PULSE_DURATION,
}

_POSITION_PROPS = ("x", "y")


class CellRenderer(Protocol):
    def create_cell_visual(self, symbol: str, x: float, y: float) -> int: ...

    def update_cell_visual(self, handle: int, symbol: str) -> None: ...

    def animate(
        self,
        handle: int,
        properties: Mapping[str, float],
        duration: float,
        easing: "str | Easing | None",
        on_finish: Optional[Callable[[], None]] = None,
        *,
        delay: float = 0.0,
        start: Optional[Mapping[str, float]] = None,
        run: Optional[SequenceRun] = None,
    ) -> None: ...

    def destroy_visual(self, handle: int) -> None: ...

    def play_effect(self, kind: str, x: float, y: float, color_seed: str) -> None: ...

    def move_visual(self, handle: int, x: float, y: float) -> None: ...

    def clear(self) -> None: ...


class EntityCellRenderer:
    """Stores visuals, tweens and effects as entities in the shared world."""

    def __init__(self, world: World):
        self.world = world

    def _visual(self, handle: int) -> CellVisual | None:
        try:
            return self.world.component_for_entity(handle, CellVisual)
        except KeyError:
            return None

    def visual(self, handle: int) -> CellVisual | None:
        return self._visual(handle)

    def create_cell_visual(self, symbol: str, x: float, y: float) -> int:
        return self.world.create_entity(CellVisual(symbol=symbol, x=x, y=y))

    def update_cell_visual(self, handle: int, symbol: str) -> None:
        visual = self._visual(handle)
        if visual is not None:
            visual.symbol = symbol

    def animate(self, handle, properties, duration, easing, on_finish=None, *, delay=0.0, start=None, run=None) -> None:
        """Tween ``properties`` to their target values.

        ``start`` values, when given, are applied at once and the tween runs
        from them; otherwise it runs from the current values.
        """
        visual = self._visual(handle)
        if visual is None:
            return
        end = {prop: float(value) for prop, value in properties.items()}
        # A newer tween takes over any property an older one was driving.
        for ent, tween in list(self.world.get_component(Tween)):
            if tween.target != handle:
                continue
            for prop in end:
                tween.end.pop(prop, None)
                tween.start.pop(prop, None)
            if not tween.end:
                self.world.delete_entity(ent, immediate=True)
        if start:
            for prop, value in start.items():
                setattr(visual, prop, float(value))
        origin = {prop: float(getattr(visual, prop)) for prop in end}
        tween = Tween(
            target=handle,
            start=origin,
            end=end,
            duration=max(0.0, float(duration)),
            easing=resolve_easing(easing),
            delay=max(0.0, float(delay)),
            on_finish=on_finish,
            run=run,
        )
        self.world.create_entity(tween)

    def destroy_visual(self, handle: int) -> None:
        if self._visual(handle) is None:
            return
        for ent, tween in list(self.world.get_component(Tween)):
            if tween.target == handle:
                self.world.delete_entity(ent, immediate=True)
        self.world.delete_entity(handle, immediate=True)

    def play_effect(self, kind: str, x: float, y: float, color_seed: str) -> None:
        duration = EFFECT_DURATIONS.get(kind, MATCH_CONTOUR_DURATION)
        self.world.create_entity(VisualEffect(kind=kind, x=x, y=y, color_seed=color_seed, duration=duration))

    def move_visual(self, handle: int, x: float, y: float) -> None:
        """Place a visual at new coordinates, retargeting an in-flight move."""
        visual = self._visual(handle)
        if visual is None:
            return
        target = {"x": float(x), "y": float(y)}
        for _, tween in self.world.get_component(Tween):
            if tween.target != handle or not any(p in tween.end for p in _POSITION_PROPS):
                continue
            eased = tween.easing(tween.progress)
            for prop in _POSITION_PROPS:
                if prop not in tween.end:
                    continue
                shift = target[prop] - tween.end[prop]
                tween.start[prop] += shift
                tween.end[prop] = target[prop]
                start = tween.start[prop]
                setattr(visual, prop, start + (target[prop] - start) * eased)
                target.pop(prop)
        for prop, value in target.items():
            setattr(visual, prop, value)

    def clear(self) -> None:
        for component in (Tween, VisualEffect, CellVisual):
            for ent in [ent for ent, _ in self.world.get_component(component)]:
                self.world.delete_entity(ent, immediate=True)
