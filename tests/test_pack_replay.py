import logging

from tumble.components.game_state import GameState, PlayState
from tumble.events.bus import (
    EVENT_PACK_LOADED,
    EVENT_PACK_RECEIVED,
    EVENT_REPLAY_CLOSE,
    EVENT_REPLAY_CLOSED,
    EVENT_REPLAY_OPENED,
    EVENT_REPLAY_TICKET,
    EVENT_SEQUENCE_COMPLETED,
)
from tumble.model.outcome import PackOutcome
from tumble.utils.game_state import current_play_state
from tests.helpers import Recorder, as_lists, drive, grid, make_engine, match, outcome, visual_symbols

FIRST = grid("ABCDE", "FGHIJ", "KLMNO")
SECOND = grid("AAAAA", "BBBBB", "CCCCC")


def _pack():
    plays = (
        outcome(FIRST, outcome_id="t0"),
        outcome(SECOND, steps=[match({(0, 0)}, grid_after=grid("ZAAAA", "BBBBB", "CCCCC"), win=3)], outcome_id="t1", total_win=3),
    )
    return PackOutcome(id="pack-9", level="nivel1", plays=plays, total_bet=2, total_win=3, best_index=1)


def _context(engine):
    for _, state in engine.world.get_component(GameState):
        return state.context
    return None


def test_loading_a_pack_opens_the_ticket_list():
    engine = make_engine()
    recorder = Recorder(engine.event_bus, names=[EVENT_PACK_LOADED])
    engine.lifecycle.load_pack(_pack())
    assert current_play_state(engine.world) == PlayState.PACK_LIST
    assert _context(engine).mode == "pack"
    assert _context(engine).pack_id == "pack-9"
    assert recorder.of(EVENT_PACK_LOADED) == [{"pack_id": "pack-9", "plays": 2}]


def test_replaying_a_ticket_stays_in_replay_after_completion():
    engine = make_engine()
    recorder = Recorder(engine.event_bus, names=[EVENT_REPLAY_OPENED, EVENT_SEQUENCE_COMPLETED])
    engine.lifecycle.load_pack(_pack())
    run = engine.lifecycle.replay_ticket(1)

    assert run is not None
    assert run.outcome.id == "t1"
    assert current_play_state(engine.world) == PlayState.REPLAY
    assert _context(engine).ticket_index == 1
    assert engine.lifecycle.session.ticket_index == 1
    drive(engine.event_bus, 3.0)

    assert recorder.names() == [EVENT_REPLAY_OPENED, EVENT_SEQUENCE_COMPLETED]
    assert current_play_state(engine.world) == PlayState.REPLAY
    assert visual_symbols(engine) == as_lists(grid("ZAAAA", "BBBBB", "CCCCC"))
    assert engine.lifecycle.session.accumulated_win == 3


def test_replaying_the_same_ticket_twice_gives_the_same_board():
    engine = make_engine()
    engine.lifecycle.load_pack(_pack())
    engine.lifecycle.replay_ticket(1)
    drive(engine.event_bus, 3.0)
    first = visual_symbols(engine)
    engine.lifecycle.replay_ticket(1)
    drive(engine.event_bus, 3.0)
    assert visual_symbols(engine) == first


def test_unknown_tickets_are_refused(caplog):
    engine = make_engine()
    with caplog.at_level(logging.WARNING, logger="tumble.lifecycle"):
        assert engine.lifecycle.replay_ticket(0) is None
        engine.lifecycle.load_pack(_pack())
        assert engine.lifecycle.replay_ticket(5) is None
    assert "no pack loaded" in caplog.text
    assert "outside pack" in caplog.text
    assert current_play_state(engine.world) == PlayState.PACK_LIST


def test_closing_a_replay_cancels_it_and_keeps_the_board():
    engine = make_engine()
    recorder = Recorder(engine.event_bus, names=[EVENT_REPLAY_CLOSED, EVENT_SEQUENCE_COMPLETED])
    engine.lifecycle.load_pack(_pack())
    run = engine.lifecycle.replay_ticket(1)
    drive(engine.event_bus, 0.5)
    engine.lifecycle.close_replay()
    drive(engine.event_bus, 3.0)

    assert run.cancelled
    assert recorder.of(EVENT_REPLAY_CLOSED) == [{"ticket_index": 1}]
    assert recorder.of(EVENT_SEQUENCE_COMPLETED) == []
    assert current_play_state(engine.world) == PlayState.PACK_LIST
    assert _context(engine).ticket_index is None
    assert visual_symbols(engine) == as_lists(SECOND)


def test_summary_needs_a_pack(engine):
    assert engine.lifecycle.show_summary() is None
    pack = _pack()
    engine.lifecycle.load_pack(pack)
    assert engine.lifecycle.show_summary() is pack
    assert current_play_state(engine.world) == PlayState.SUMMARY


def test_pack_flow_through_events():
    engine = make_engine()
    engine.event_bus.emit(EVENT_PACK_RECEIVED, pack=_pack())
    engine.event_bus.emit(EVENT_REPLAY_TICKET, ticket_index=0)
    assert engine.lifecycle.session.outcome.id == "t0"
    assert current_play_state(engine.world) == PlayState.REPLAY
    engine.event_bus.emit(EVENT_REPLAY_CLOSE)
    assert current_play_state(engine.world) == PlayState.PACK_LIST
