from __future__ import annotations

from esper import World

from tumble.components.cell_visual import CellVisual
from tumble.components.tween import Tween
from tumble.components.visual_effect import VisualEffect
from tumble.events.bus import EVENT_ANIMATION_COMPLETE, EVENT_TICK, EventBus


class AnimationSystem:
    """Advances tweens on cell visuals and ages visual effects every tick."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        self._advance_tweens(dt)
        self._advance_effects(dt)

    def _advance_tweens(self, dt: float) -> None:
        finished = []
        for ent, tween in list(self.world.get_component(Tween)):
            try:
                visual = self.world.component_for_entity(tween.target, CellVisual)
            except KeyError:
                # Target destroyed mid-flight; nothing left to animate.
                self.world.delete_entity(ent, immediate=True)
                continue
            tween.elapsed += dt
            if not tween.started:
                continue
            apply_tween(visual, tween)
            if tween.progress >= 1.0:
                finished.append((ent, tween))
        for ent, tween in finished:
            self.world.delete_entity(ent, immediate=True)
            self.event_bus.emit(EVENT_ANIMATION_COMPLETE, handle=tween.target, properties=tuple(tween.end))
            if tween.on_finish is None:
                continue
            if tween.run is not None and tween.run.cancelled:
                continue
            tween.on_finish()

    def _advance_effects(self, dt: float) -> None:
        for ent, effect in list(self.world.get_component(VisualEffect)):
            effect.elapsed += dt
            if effect.progress >= 1.0:
                self.world.delete_entity(ent, immediate=True)


def apply_tween(visual: CellVisual, tween: Tween) -> None:
    eased = tween.easing(tween.progress)
    for prop, end in tween.end.items():
        start = tween.start.get(prop, end)
        setattr(visual, prop, start + (end - start) * eased)
