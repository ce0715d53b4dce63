"""Step sequencer: plays an outcome's cascade steps in order.

Per run the phases are ``INTRO``, then for every step ``HIGHLIGHT`` (bonus)
or ``REMOVE`` followed by ``REFILL``, then ``DONE``. Every phase transition
is a delayed call owned by the run, so cancelling the run silences the rest
of the sequence.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from tumble.components.grid_state import GridState, Position
from tumble.components.sequence_run import SequencePhase, SequenceRun
from tumble.config import BoardShape
from tumble.constants import (
    BONUS_HIGHLIGHT_BASE,
    BONUS_HIGHLIGHT_STAGGER,
    BONUS_PULSE_DURATION,
    BONUS_TRIGGER_SYMBOL,
    INTER_STEP_DELAY,
    INTRO_TAIL,
    MATCH_CONTOUR_DURATION,
    MIN_INITIAL_DELAY,
    MIN_SETTLE,
    REMOVAL_DURATION,
    REMOVAL_TAIL,
)
from tumble.events.bus import (
    EVENT_BONUS_TRIGGERED,
    EVENT_PHASE_CHANGED,
    EVENT_SEQUENCE_COMPLETED,
    EVENT_STEP_STARTED,
    EVENT_WIN_INCREMENTED,
    EventBus,
)
from tumble.fill.base import FillStrategy
from tumble.model.outcome import BonusStep, MatchStep
from tumble.rendering.cell_renderer import CellRenderer
from tumble.systems.scheduler import TimerSystem
from tumble.ui.layout import Metrics, cell_position
from tumble.utils.grid_ops import (
    apply_gravity,
    find_symbol_cells,
    in_bounds_cells,
    in_range_drop_in,
    normalize_grid,
)

logger = logging.getLogger("tumble.sequencer")


def resolve_bonus_cells(
    symbols: Sequence[Sequence[str]],
    step: BonusStep,
    shape: BoardShape,
    trigger_symbol: str = BONUS_TRIGGER_SYMBOL,
) -> List[Position]:
    """Cells to highlight for a bonus trigger.

    Explicit trigger cells count only when in bounds and currently showing
    the trigger symbol. If none qualify, the board is scanned row-major and
    the first ``trigger_count`` matches win.
    """
    limit = step.trigger_count
    chosen: List[Position] = []
    if step.trigger_cells:
        seen = set()
        for cell in step.trigger_cells:
            if cell in seen or not shape.contains(*cell):
                continue
            seen.add(cell)
            if symbols[cell[0]][cell[1]] == trigger_symbol:
                chosen.append(cell)
        if len(seen) < len(step.trigger_cells):
            logger.warning("Ignoring out-of-range or repeated triggerCells in %s", list(step.trigger_cells))
    if not chosen:
        chosen = find_symbol_cells(symbols, trigger_symbol)
    return chosen[:limit]


def bonus_highlight_duration(count: int) -> float:
    if count <= 0:
        return MIN_SETTLE
    return BONUS_HIGHLIGHT_BASE + (count - 1) * BONUS_HIGHLIGHT_STAGGER


class StepSequencer:
    def __init__(
        self,
        event_bus: EventBus,
        scheduler: TimerSystem,
        renderer: CellRenderer,
        grid: GridState,
        shape: BoardShape,
        metrics,
    ):
        self.event_bus = event_bus
        self.scheduler = scheduler
        self.renderer = renderer
        self.grid = grid
        self.shape = shape
        self._metrics = metrics
        self.run: Optional[SequenceRun] = None
        self.strategy: Optional[FillStrategy] = None

    def _position(self, row: int, col: int):
        metrics: Metrics = self._metrics()
        return cell_position(metrics, row, col)

    def _after(self, delay: float, callback, label: str) -> None:
        self.scheduler.schedule(delay, callback, run=self.run, label=label)

    def _set_phase(self, phase: SequencePhase, step_index: Optional[int]) -> bool:
        """Record and announce ``phase``; False when a listener cancelled the run."""
        run = self.run
        run.phase = phase
        logger.debug("Run %d phase %s (step %s)", run.run_id, phase.value, step_index)
        self.event_bus.emit(
            EVENT_PHASE_CHANGED, phase=phase, step_index=step_index, outcome_id=run.outcome.id
        )
        return not run.cancelled

    # entry -------------------------------------------------------------

    def start(self, run: SequenceRun, strategy: FillStrategy) -> None:
        self.run = run
        self.strategy = strategy
        if not self._set_phase(SequencePhase.INTRO, None):
            return
        intro = strategy.intro_duration(self.grid.symbols, self.shape)
        initial_delay = max(MIN_INITIAL_DELAY, intro + INTRO_TAIL)
        logger.debug("Run %d intro %.2fs, first step after %.2fs", run.run_id, intro, initial_delay)
        self._after(initial_delay, lambda: self._run_step(0), "first-step")

    # steps -------------------------------------------------------------

    def _run_step(self, index: int) -> None:
        run = self.run
        steps = run.outcome.steps
        if index >= len(steps):
            self._complete()
            return
        run.cursor = index
        self.event_bus.emit(EVENT_STEP_STARTED, index=index, total=len(steps), outcome_id=run.outcome.id)
        if run.cancelled:
            return
        step = steps[index]
        if isinstance(step, BonusStep):
            self._highlight(index, step)
        else:
            self._remove(index, step)

    def _step_done(self, index: int) -> None:
        self._after(INTER_STEP_DELAY, lambda: self._run_step(index + 1), "next-step")

    def _complete(self) -> None:
        run = self.run
        if not self._set_phase(SequencePhase.DONE, None):
            return
        run.finished = True
        total = len(run.outcome.steps)
        expected = run.outcome.total_win
        if expected and abs(expected - run.accumulated_win) > 1e-6:
            logger.warning(
                "Play %s step wins sum to %.2f but totalWin is %.2f", run.outcome.id, run.accumulated_win, expected
            )
        logger.info("Run %d finished: %d steps, win %.2f", run.run_id, total, run.accumulated_win)
        self.event_bus.emit(EVENT_SEQUENCE_COMPLETED, total_steps=total, outcome_id=run.outcome.id)

    # bonus -------------------------------------------------------------

    def _highlight(self, index: int, step: BonusStep) -> None:
        if not self._set_phase(SequencePhase.HIGHLIGHT, index):
            return
        cells = resolve_bonus_cells(self.grid.symbols, step, self.shape)
        for order, (row, col) in enumerate(cells):
            self._after(order * BONUS_HIGHLIGHT_STAGGER, lambda row=row, col=col: self._pulse(row, col), "bonus-pulse")
        self.event_bus.emit(EVENT_BONUS_TRIGGERED, payload=step.bonus_payload, outcome_id=self.run.outcome.id)
        if self.run.cancelled:
            return
        self._after(bonus_highlight_duration(len(cells)), lambda: self._step_done(index), "bonus-done")

    def _pulse(self, row: int, col: int) -> None:
        x, y = self._position(row, col)
        self.renderer.play_effect("bonus_pulse", x, y, BONUS_TRIGGER_SYMBOL)
        handle = self.grid.handles.get((row, col))
        if handle is not None:
            self.renderer.animate(
                handle, {"scale": 1.0}, BONUS_PULSE_DURATION * 2, "back_out", start={"scale": 1.18}, run=self.run
            )

    # match -------------------------------------------------------------

    def _remove(self, index: int, step: MatchStep) -> None:
        if not self._set_phase(SequencePhase.REMOVE, index):
            return
        removed = in_bounds_cells(step.remove_cells, self.shape, label="removeCells")
        for row, col in sorted(removed):
            x, y = self._position(row, col)
            self.renderer.play_effect("contour", x, y, self.grid.symbols[row][col])
        self._after(MATCH_CONTOUR_DURATION, lambda: self._start_removal(index, step, removed), "removal")

    def _start_removal(self, index: int, step: MatchStep, removed: set) -> None:
        run = self.run
        for row, col in sorted(removed):
            x, y = self._position(row, col)
            self.renderer.play_effect("explosion", x, y, self.grid.symbols[row][col])
            handle = self.grid.handles.get((row, col))
            if handle is not None:
                self.renderer.animate(
                    handle, {"scale": 0.6, "alpha": 0.0}, REMOVAL_DURATION, "cubic_in", run=run
                )
        if step.win_for_step > 0:
            run.accumulated_win += step.win_for_step
            self.event_bus.emit(EVENT_WIN_INCREMENTED, amount=step.win_for_step, outcome_id=run.outcome.id)
            if run.cancelled:
                return
        self._after(REMOVAL_DURATION + REMOVAL_TAIL, lambda: self._refill(index, step, removed), "refill")

    def _target_grid(self, step: MatchStep, removed: set, drop_in) -> List[List[str]]:
        if step.grid_after is not None:
            return normalize_grid(step.grid_after, self.shape, label="gridAfter")
        if drop_in:
            return apply_gravity(self.grid.symbols, removed, drop_in, self.shape)
        return [list(row) for row in self.grid.symbols]

    def _refill(self, index: int, step: MatchStep, removed: set) -> None:
        if not self._set_phase(SequencePhase.REFILL, index):
            return
        drop_in = in_range_drop_in(step.drop_in, self.shape)
        grid_after = self._target_grid(step, removed, drop_in)
        duration = self.strategy.apply_refill(removed, drop_in, grid_after)
        self._after(duration, lambda: self._step_done(index), "refill-done")
