from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Tuple

from tumble.components.cell_visual import CellVisual
from tumble.config import BoardShape, FillMode, ReplayConfig
from tumble.engine import ReplayEngine, build_engine
from tumble.events.bus import (
    EVENT_BONUS_TRIGGERED,
    EVENT_SEQUENCE_COMPLETED,
    EVENT_STEP_STARTED,
    EVENT_TICK,
    EVENT_WIN_INCREMENTED,
    EventBus,
)
from tumble.model.outcome import BonusStep, MatchStep, Outcome
from tumble.rendering.cell_renderer import EntityCellRenderer

OBSERVER_EVENTS = (
    EVENT_STEP_STARTED,
    EVENT_WIN_INCREMENTED,
    EVENT_BONUS_TRIGGERED,
    EVENT_SEQUENCE_COMPLETED,
)


class RecordingRenderer(EntityCellRenderer):
    """Entity renderer that also remembers every effect it was asked to play."""

    def __init__(self, world):
        super().__init__(world)
        self.effects: List[Tuple[str, float, float, str]] = []

    def play_effect(self, kind, x, y, color_seed):
        self.effects.append((kind, x, y, color_seed))
        super().play_effect(kind, x, y, color_seed)

    def effects_of(self, kind: str) -> List[Tuple[str, float, float, str]]:
        return [effect for effect in self.effects if effect[0] == kind]


class Recorder:
    """Collects (event, payload) pairs for the given event names."""

    def __init__(self, bus: EventBus, names: Iterable[str] = OBSERVER_EVENTS):
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        for name in names:
            bus.subscribe(name, self._handler(name))

    def _handler(self, name: str):
        def handler(sender, **payload):
            self.events.append((name, payload))
        return handler

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> List[Dict[str, Any]]:
        return [payload for event, payload in self.events if event == name]

    def simplified(self) -> List[Tuple[str, Any]]:
        """Event names with the payload values that identify them."""
        out = []
        for name, payload in self.events:
            if name == EVENT_STEP_STARTED:
                out.append((name, (payload["index"], payload["total"])))
            elif name == EVENT_WIN_INCREMENTED:
                out.append((name, payload["amount"]))
            elif name == EVENT_BONUS_TRIGGERED:
                out.append((name, payload["payload"]))
            elif name == EVENT_SEQUENCE_COMPLETED:
                out.append((name, payload["total_steps"]))
            else:
                out.append((name, None))
        return out


def drive(bus: EventBus, seconds: float, dt: float = 1/60) -> None:
    ticks = int(round(seconds / dt))
    for _ in range(ticks):
        bus.emit(EVENT_TICK, dt=dt)


def make_engine(rows: int = 3, cols: int = 5, fill_mode: FillMode = FillMode.REPLACE, **kwargs) -> ReplayEngine:
    config = ReplayConfig(board_shape=BoardShape(rows, cols), fill_mode=fill_mode)
    kwargs.setdefault("telemetry", False)
    kwargs.setdefault("renderer_factory", RecordingRenderer)
    return build_engine(config=config, **kwargs)


def grid(*rows: str) -> Tuple[Tuple[str, ...], ...]:
    """``grid("ABC", "DEF")`` -> (("A", "B", "C"), ("D", "E", "F"))."""
    return tuple(tuple(row) for row in rows)


def match(remove: Iterable[Tuple[int, int]], grid_after=None, win: float = 0.0, drop_in=None) -> MatchStep:
    return MatchStep(
        remove_cells=frozenset(remove),
        drop_in=dict(drop_in or {}),
        win_for_step=win,
        grid_after=grid_after,
    )


def bonus(count: int = 3, cells=None, payload: Any = None) -> BonusStep:
    return BonusStep(trigger_count=count, trigger_cells=tuple(cells) if cells is not None else None, bonus_payload=payload)


def outcome(initial, steps: Sequence = (), outcome_id: str = "play-1", total_win: float = 0.0, mode: str = "nivel1") -> Outcome:
    return Outcome(
        id=outcome_id,
        mode=mode,
        bet=1.0,
        initial_grid=initial,
        steps=tuple(steps),
        total_win=total_win,
    )


def visual_symbols(engine: ReplayEngine) -> List[List[str]]:
    """Symbols currently shown by the handle at each board cell."""
    grid_state = engine.lifecycle.grid
    shown = [["" for _ in range(grid_state.cols)] for _ in range(grid_state.rows)]
    for (row, col), handle in grid_state.handles.items():
        shown[row][col] = engine.world.component_for_entity(handle, CellVisual).symbol
    return shown


def as_lists(rows) -> List[List[str]]:
    return [list(row) for row in rows]


def coordinates(shape: BoardShape) -> set:
    return set(shape.coordinates())
