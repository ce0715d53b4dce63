from esper import World

from tumble.components.game_state import GameState, PlayState
from tumble.events.bus import EventBus


def create_world(event_bus: EventBus, initial_state: PlayState = PlayState.MENU) -> World:
    world = World()
    # Register the global game state resource.
    world.create_entity(GameState(state=initial_state))
    return world
