from __future__ import annotations

import logging

from esper import World

from tumble.components.game_state import GameState, PlayContext, PlayState
from tumble.events.bus import EVENT_GAME_STATE_CHANGED, EventBus

logger = logging.getLogger("tumble.flow")

_UNSET = object()


def current_play_state(world: World) -> PlayState | None:
    for _, state in world.get_component(GameState):
        return state.state
    return None


def set_play_state(
    world: World,
    event_bus: EventBus,
    state: PlayState,
    *,
    mode=_UNSET,
    pack_id=_UNSET,
    ticket_index=_UNSET,
) -> None:
    """Update the global play state and emit a change event when it differs.

    Context fields that are passed replace the stored ones; a context change
    alone also emits.
    """
    updates = {
        key: value
        for key, value in (("mode", mode), ("pack_id", pack_id), ("ticket_index", ticket_index))
        if value is not _UNSET
    }
    previous_state: PlayState | None = None
    for _, game_state in world.get_component(GameState):
        previous_state = game_state.state
        context = game_state.context
        context_changed = any(getattr(context, key) != value for key, value in updates.items())
        for key, value in updates.items():
            setattr(context, key, value)
        if game_state.state == state and not context_changed:
            return
        game_state.state = state
        logger.info("Play state %s -> %s", previous_state.name, state.name)
        event_bus.emit(
            EVENT_GAME_STATE_CHANGED,
            previous_state=previous_state,
            new_state=state,
            context=context,
        )
        return
    # No existing GameState component; create a new one.
    game_state = GameState(state=state, context=PlayContext(**updates))
    world.create_entity(game_state)
    logger.info("Play state -> %s", state.name)
    event_bus.emit(
        EVENT_GAME_STATE_CHANGED,
        previous_state=previous_state,
        new_state=state,
        context=game_state.context,
    )
