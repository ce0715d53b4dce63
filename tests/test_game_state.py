from esper import World

from tumble.components.game_state import GameState, PlayState
from tumble.events.bus import EVENT_GAME_STATE_CHANGED, EventBus
from tumble.utils.game_state import current_play_state, set_play_state
from tumble.world import create_world


def _collect(bus):
    changes = []
    bus.subscribe(EVENT_GAME_STATE_CHANGED, lambda sender, **kw: changes.append(kw))
    return changes


def test_world_starts_in_menu():
    bus = EventBus()
    world = create_world(bus)
    assert current_play_state(world) == PlayState.MENU


def test_state_change_emits_previous_and_new():
    bus = EventBus()
    world = create_world(bus)
    changes = _collect(bus)
    set_play_state(world, bus, PlayState.READY)
    assert len(changes) == 1
    assert changes[0]["previous_state"] == PlayState.MENU
    assert changes[0]["new_state"] == PlayState.READY


def test_same_state_and_context_is_silent():
    bus = EventBus()
    world = create_world(bus)
    set_play_state(world, bus, PlayState.READY, mode="nivel1")
    changes = _collect(bus)
    set_play_state(world, bus, PlayState.READY, mode="nivel1")
    set_play_state(world, bus, PlayState.READY)
    assert changes == []


def test_context_change_alone_emits():
    bus = EventBus()
    world = create_world(bus)
    set_play_state(world, bus, PlayState.REPLAY, ticket_index=0)
    changes = _collect(bus)
    set_play_state(world, bus, PlayState.REPLAY, ticket_index=2)
    assert len(changes) == 1
    assert changes[0]["context"].ticket_index == 2


def test_missing_game_state_is_created():
    bus = EventBus()
    world = World()
    changes = _collect(bus)
    assert current_play_state(world) is None
    set_play_state(world, bus, PlayState.LOADING, pack_id="p")
    assert current_play_state(world) == PlayState.LOADING
    states = list(world.get_component(GameState))
    assert len(states) == 1
    assert states[0][1].context.pack_id == "p"
    assert changes[0]["previous_state"] is None
