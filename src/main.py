"""Entry point for the tumble replay client.

Loads a play (or pack) result from a JSON file and replays it in an Arcade
window. Keys: SPACE replays, C clears, 1-9 replay pack tickets, ESC closes a
replay.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from arcade import Window, color, key, run, set_background_color

from tumble.components.game_state import PlayState
from tumble.config import ReplayConfig
from tumble.engine import ReplayEngine, build_engine
from tumble.errors import TumbleError
from tumble.events.bus import (
    EVENT_BOARD_CLEAR_REQUEST,
    EVENT_OUTCOME_RECEIVED,
    EVENT_PACK_RECEIVED,
    EVENT_PLAY_REQUESTED,
    EVENT_REPLAY_CLOSE,
    EVENT_REPLAY_TICKET,
    EVENT_RESIZE,
)
from tumble.model.outcome import Outcome, PackOutcome
from tumble.model.parsing import outcome_from_payload, pack_from_payload
from tumble.systems.render import RenderSystem
from tumble.utils.game_state import current_play_state
from tumble.utils.log import configure_logging

logger = logging.getLogger("tumble")


class TumbleWindow(Window):
    def __init__(self, engine: ReplayEngine, play: Outcome | PackOutcome | None, width: int = 640, height: int = 640):
        super().__init__(width, height, "Tumble Replay", resizable=True)
        self.set_update_rate(1/60)
        self.engine = engine
        self.event_bus = engine.event_bus
        self.render_system = RenderSystem(engine.world, self.event_bus, self, symbol_colors=engine.config.symbol_colors)
        self._play = play
        set_background_color(color.BLACK)
        self.event_bus.emit(EVENT_RESIZE, width=width, height=height)
        self._dispatch_play()

    def _dispatch_play(self) -> None:
        if self._play is None:
            self.event_bus.emit(EVENT_BOARD_CLEAR_REQUEST)
        elif isinstance(self._play, PackOutcome):
            self.event_bus.emit(EVENT_PLAY_REQUESTED, mode="pack")
            self.event_bus.emit(EVENT_PACK_RECEIVED, pack=self._play)
            self.event_bus.emit(EVENT_REPLAY_TICKET, ticket_index=0)
        else:
            self.event_bus.emit(EVENT_PLAY_REQUESTED, mode=self._play.mode or None)
            self.event_bus.emit(EVENT_OUTCOME_RECEIVED, outcome=self._play)

    def on_resize(self, width: int, height: int):
        self.event_bus.emit(EVENT_RESIZE, width=width, height=height)
        return super().on_resize(width, height)

    def on_update(self, delta_time: float):
        self.engine.tick(delta_time)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == key.SPACE:
            self._dispatch_play()
        elif symbol == key.C:
            self.event_bus.emit(EVENT_BOARD_CLEAR_REQUEST)
        elif symbol == key.ESCAPE and current_play_state(self.engine.world) == PlayState.REPLAY:
            self.event_bus.emit(EVENT_REPLAY_CLOSE)
        elif key.KEY_1 <= symbol <= key.KEY_9:
            self.event_bus.emit(EVENT_REPLAY_TICKET, ticket_index=symbol - key.KEY_1)


def load_play(path: str) -> Outcome | PackOutcome:
    with open(path, encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and "plays" in payload:
        return pack_from_payload(payload)
    return outcome_from_payload(payload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tumble-replay", description="Replay a tumble play result.")
    parser.add_argument("outcome", nargs="?", help="JSON file with a play or pack result")
    parser.add_argument("--fill-mode", help="replace, cascade or reel-spin")
    parser.add_argument("--rows", type=int)
    parser.add_argument("--cols", type=int)
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        config = ReplayConfig.from_env()
        shape = None
        if args.rows or args.cols:
            shape = (args.rows or config.board_shape.rows, args.cols or config.board_shape.cols)
        config = config.with_overrides(board_shape=shape, fill_mode=args.fill_mode)
        play = load_play(args.outcome) if args.outcome else None
    except (OSError, json.JSONDecodeError, TumbleError) as exc:
        logger.error("Cannot start replay: %s", exc)
        return 2
    engine = build_engine(config=config)
    TumbleWindow(engine, play)
    run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
