"""Wiring of the replay systems around one world and one event bus."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from esper import World

from tumble.config import ReplayConfig
from tumble.constants import DEFAULT_CONTAINER_HEIGHT, DEFAULT_CONTAINER_WIDTH
from tumble.events.bus import EVENT_TICK, EventBus
from tumble.rendering.cell_renderer import EntityCellRenderer
from tumble.systems.animation import AnimationSystem
from tumble.systems.layout_system import LayoutSystem
from tumble.systems.lifecycle import LifecycleController
from tumble.systems.scheduler import TimerSystem
from tumble.systems.telemetry_system import TelemetrySystem
from tumble.world import create_world


@dataclass
class ReplayEngine:
    world: World
    event_bus: EventBus
    config: ReplayConfig
    scheduler: TimerSystem
    animation: AnimationSystem
    renderer: EntityCellRenderer
    layout: LayoutSystem
    lifecycle: LifecycleController
    telemetry: Optional[TelemetrySystem] = None

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)


def build_engine(
    event_bus: EventBus | None = None,
    config: ReplayConfig | None = None,
    *,
    container_size: Tuple[float, float] = (DEFAULT_CONTAINER_WIDTH, DEFAULT_CONTAINER_HEIGHT),
    telemetry: bool = True,
    renderer_factory: Callable[[World], EntityCellRenderer] = EntityCellRenderer,
) -> ReplayEngine:
    event_bus = event_bus or EventBus()
    config = config or ReplayConfig()
    world = create_world(event_bus)
    # Timers fire before tweens advance within a tick.
    scheduler = TimerSystem(world, event_bus)
    animation = AnimationSystem(world, event_bus)
    renderer = renderer_factory(world)
    layout = LayoutSystem(world, event_bus, renderer, config=config, container_size=container_size)
    lifecycle = LifecycleController(world, event_bus, scheduler, renderer, layout, config=config)
    telemetry_system = TelemetrySystem(event_bus) if telemetry else None
    return ReplayEngine(
        world=world,
        event_bus=event_bus,
        config=config,
        scheduler=scheduler,
        animation=animation,
        renderer=renderer,
        layout=layout,
        lifecycle=lifecycle,
        telemetry=telemetry_system,
    )
