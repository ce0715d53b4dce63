"""Lifecycle controller: owns the session and decides which run is authoritative.

``submit`` and ``clear`` always win over whatever is playing: the previous
run is cancelled (its pending calls are dropped and any stray callback sees
the cancelled flag) before the board is rebuilt.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from esper import World

from tumble.components.board import Board
from tumble.components.game_state import PlayState
from tumble.components.grid_state import GridState
from tumble.components.sequence_run import SequenceRun
from tumble.components.session import Session
from tumble.config import BoardShape, FillMode, ReplayConfig
from tumble.events.bus import (
    EVENT_BOARD_CHANGED,
    EVENT_BOARD_CLEAR_REQUEST,
    EVENT_OUTCOME_RECEIVED,
    EVENT_PACK_LOADED,
    EVENT_PACK_RECEIVED,
    EVENT_PLAY_REQUESTED,
    EVENT_REPLAY_CLOSE,
    EVENT_REPLAY_CLOSED,
    EVENT_REPLAY_OPENED,
    EVENT_REPLAY_TICKET,
    EVENT_SEQUENCE_COMPLETED,
    EVENT_STEP_STARTED,
    EventBus,
)
from tumble.fill.base import FillContext
from tumble.fill.registry import create_fill_strategy
from tumble.model.outcome import Outcome, PackOutcome
from tumble.rendering.cell_renderer import CellRenderer
from tumble.systems.layout_system import LayoutSystem
from tumble.systems.scheduler import TimerSystem
from tumble.systems.sequencer import StepSequencer
from tumble.ui.layout import cell_position
from tumble.utils.game_state import current_play_state, set_play_state
from tumble.utils.grid_ops import empty_grid, normalize_grid

logger = logging.getLogger("tumble.lifecycle")


class LifecycleController:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        scheduler: TimerSystem,
        renderer: CellRenderer,
        layout: LayoutSystem,
        *,
        config: ReplayConfig | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.scheduler = scheduler
        self.renderer = renderer
        self.layout = layout
        self.config = config or ReplayConfig()
        shape = self.config.board_shape
        self.board_entity = world.create_entity(
            Board(shape.rows, shape.cols, self.config.fill_mode),
            GridState(symbols=empty_grid(shape)),
        )
        self.session_entity = world.create_entity(Session())
        self.sequencer: Optional[StepSequencer] = None
        self.event_bus.subscribe(EVENT_PLAY_REQUESTED, self.on_play_requested)
        self.event_bus.subscribe(EVENT_OUTCOME_RECEIVED, self.on_outcome_received)
        self.event_bus.subscribe(EVENT_BOARD_CLEAR_REQUEST, self.on_clear_request)
        self.event_bus.subscribe(EVENT_PACK_RECEIVED, self.on_pack_received)
        self.event_bus.subscribe(EVENT_REPLAY_TICKET, self.on_replay_ticket)
        self.event_bus.subscribe(EVENT_REPLAY_CLOSE, self.on_replay_close)
        self.event_bus.subscribe(EVENT_STEP_STARTED, self.on_step_started)
        self.event_bus.subscribe(EVENT_SEQUENCE_COMPLETED, self.on_sequence_completed)

    # singletons --------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    @property
    def grid(self) -> GridState:
        return self.world.component_for_entity(self.board_entity, GridState)

    @property
    def session(self) -> Session:
        return self.world.component_for_entity(self.session_entity, Session)

    @property
    def shape(self) -> BoardShape:
        return self.board.shape

    # commands ----------------------------------------------------------

    def configure(self, *, board_shape=None, fill_mode=None) -> None:
        """Change the shape and fill mode used from the next submit or clear on."""
        self.config = self.config.with_overrides(board_shape=board_shape, fill_mode=fill_mode)
        board = self.board
        board.rows = self.config.board_shape.rows
        board.cols = self.config.board_shape.cols
        board.fill_mode = self.config.fill_mode
        logger.info(
            "Configured board %dx%d, fill mode %s", board.rows, board.cols, board.fill_mode.value
        )

    def request_play(self, mode: Optional[str] = None) -> None:
        """Enter LOADING while the transport fetches a play; the board keeps its current content."""
        logger.info("Waiting for play result%s", f" ({mode})" if mode else "")
        if mode is None:
            set_play_state(self.world, self.event_bus, PlayState.LOADING)
        else:
            set_play_state(self.world, self.event_bus, PlayState.LOADING, mode=mode)

    def submit(self, outcome: Outcome) -> SequenceRun:
        return self._start(outcome, PlayState.REVEAL)

    def clear(self, mode: Optional[str] = None) -> None:
        """Cancel playback and draw an empty board.

        With ``mode`` the board takes that mode's preview shape.
        """
        self._cancel_active()
        shape = self.config.board_shape if mode is None else self.config.preview_shape_for(mode)
        board = self.board
        board.rows, board.cols = shape.rows, shape.cols
        session = self.session
        session.outcome = None
        session.run = None
        session.ticket_index = None
        self._draw(empty_grid(self.shape))
        logger.info("Board cleared")
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason="clear", outcome_id=None)
        if mode is None:
            set_play_state(self.world, self.event_bus, PlayState.READY, ticket_index=None)
        else:
            set_play_state(self.world, self.event_bus, PlayState.READY, mode=mode, ticket_index=None)

    def load_pack(self, pack: PackOutcome) -> None:
        session = self.session
        session.pack = pack
        session.ticket_index = None
        logger.info("Pack %s loaded with %d plays", pack.id, len(pack.plays))
        self.event_bus.emit(EVENT_PACK_LOADED, pack_id=pack.id, plays=len(pack.plays))
        set_play_state(
            self.world, self.event_bus, PlayState.PACK_LIST, mode="pack", pack_id=pack.id, ticket_index=None
        )

    def replay_ticket(self, ticket_index: int) -> Optional[SequenceRun]:
        pack = self.session.pack
        if pack is None:
            logger.warning("Replay of ticket %s requested with no pack loaded", ticket_index)
            return None
        outcome = pack.ticket(ticket_index)
        if outcome is None:
            logger.warning("Ticket %s is outside pack %s (%d plays)", ticket_index, pack.id, len(pack.plays))
            return None
        run = self._start(outcome, PlayState.REPLAY, ticket_index=ticket_index)
        self.event_bus.emit(EVENT_REPLAY_OPENED, ticket_index=ticket_index)
        return run

    def close_replay(self) -> None:
        session = self.session
        ticket_index = session.ticket_index
        run = session.run
        if run is not None and run.active:
            self._cancel_run(run)
        session.ticket_index = None
        self.event_bus.emit(EVENT_REPLAY_CLOSED, ticket_index=ticket_index)
        set_play_state(self.world, self.event_bus, PlayState.PACK_LIST, ticket_index=None)

    def show_summary(self) -> Optional[PackOutcome]:
        pack = self.session.pack
        if pack is None:
            logger.warning("Summary requested with no pack loaded")
            return None
        set_play_state(self.world, self.event_bus, PlayState.SUMMARY, pack_id=pack.id)
        return pack

    # event handlers ----------------------------------------------------

    def on_play_requested(self, sender, **kwargs):
        self.request_play(kwargs.get('mode'))

    def on_outcome_received(self, sender, **kwargs):
        outcome = kwargs.get('outcome')
        if outcome is None:
            logger.warning("outcome_received without an outcome")
            return
        self.submit(outcome)

    def on_clear_request(self, sender, **kwargs):
        self.clear(kwargs.get('mode'))

    def on_pack_received(self, sender, **kwargs):
        pack = kwargs.get('pack')
        if pack is None:
            logger.warning("pack_received without a pack")
            return
        self.load_pack(pack)

    def on_replay_ticket(self, sender, **kwargs):
        ticket_index = kwargs.get('ticket_index')
        if ticket_index is None:
            return
        self.replay_ticket(ticket_index)

    def on_replay_close(self, sender, **kwargs):
        self.close_replay()

    def _is_current(self, outcome_id) -> bool:
        run = self.session.run
        return run is not None and not run.cancelled and run.outcome.id == outcome_id

    def on_step_started(self, sender, **kwargs):
        if kwargs.get('index') != 0 or not self._is_current(kwargs.get('outcome_id')):
            return
        if current_play_state(self.world) == PlayState.REVEAL:
            set_play_state(self.world, self.event_bus, PlayState.CASCADE_LOOP)

    def on_sequence_completed(self, sender, **kwargs):
        if not self._is_current(kwargs.get('outcome_id')):
            return
        # Replays stay open until closed explicitly.
        if current_play_state(self.world) in (PlayState.REVEAL, PlayState.CASCADE_LOOP):
            set_play_state(self.world, self.event_bus, PlayState.END_TICKET)

    # internals ---------------------------------------------------------

    def _start(self, outcome: Outcome, play_state: PlayState, *, ticket_index: Optional[int] = None) -> SequenceRun:
        self._cancel_active()
        # A preview shape left by clear(mode) only applies to the empty board.
        shape = self.config.board_shape
        board = self.board
        board.rows, board.cols = shape.rows, shape.cols
        session = self.session
        session.runs_started += 1
        run = SequenceRun(run_id=session.runs_started, outcome=outcome, fill_mode=self.board.fill_mode)
        session.outcome = outcome
        session.run = run
        session.ticket_index = ticket_index
        self._draw(normalize_grid(outcome.initial_grid, shape, label="grid0"))
        logger.info(
            "Run %d started for play %s: %d steps, fill mode %s",
            run.run_id,
            outcome.id,
            outcome.step_count,
            run.fill_mode.value,
        )
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason="submit", outcome_id=outcome.id)
        if run.cancelled:
            return run
        set_play_state(
            self.world,
            self.event_bus,
            play_state,
            mode=outcome.mode or None,
            ticket_index=ticket_index,
        )
        if run.cancelled:
            # A listener already superseded this run.
            return run
        ctx = FillContext(
            renderer=self.renderer,
            scheduler=self.scheduler,
            event_bus=self.event_bus,
            grid=self.grid,
            shape=shape,
            run=run,
            metrics=lambda: self.layout.metrics_for(shape),
        )
        strategy = create_fill_strategy(run.fill_mode, ctx)
        self.sequencer = StepSequencer(
            self.event_bus,
            self.scheduler,
            self.renderer,
            self.grid,
            shape,
            ctx.metrics,
        )
        self.sequencer.start(run, strategy)
        return run

    def _cancel_run(self, run: SequenceRun) -> None:
        run.cancel()
        dropped = self.scheduler.cancel_run(run)
        logger.info("Cancelled run %d at step %d (%d pending calls dropped)", run.run_id, run.cursor, dropped)

    def _cancel_active(self) -> None:
        run = self.session.run
        if run is not None and run.active:
            self._cancel_run(run)
        self.sequencer = None
        self.renderer.clear()
        self.grid.handles = {}

    def _draw(self, symbols: Sequence[Sequence[str]]) -> None:
        grid = self.grid
        shape = self.shape
        metrics = self.layout.metrics_for(shape)
        grid.symbols = [list(row) for row in symbols]
        grid.handles = {}
        for row, col in shape.coordinates():
            x, y = cell_position(metrics, row, col)
            grid.handles[(row, col)] = self.renderer.create_cell_visual(grid.symbols[row][col], x, y)
