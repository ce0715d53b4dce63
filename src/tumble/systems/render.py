from __future__ import annotations

from typing import Dict, Mapping

from esper import World

from tumble.components.layout_state import LayoutState
from tumble.components.session import Session
from tumble.events.bus import EventBus
from tumble.rendering.board_renderer import BoardRenderer


class RenderSystem:
    def __init__(self, world: World, event_bus: EventBus, window, *, symbol_colors: Mapping[str, str] | None = None):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        # Paytable palette; symbols it does not name keep the default colors.
        self.symbol_colors: Dict[str, str] = dict(symbol_colors or {})
        self.header_text = ""
        self._board_renderer = BoardRenderer(self)

    @property
    def board_renderer(self) -> BoardRenderer:
        return self._board_renderer

    def _layout(self) -> LayoutState | None:
        for _, layout in self.world.get_component(LayoutState):
            return layout
        return None

    def _session(self) -> Session | None:
        for _, session in self.world.get_component(Session):
            return session
        return None

    def _header(self, session: Session | None) -> str:
        if session is None or session.outcome is None:
            return "Waiting for play"
        outcome = session.outcome
        label = f"Play {outcome.id}" if outcome.id else "Play"
        if session.ticket_index is not None:
            label += f"  ticket #{session.ticket_index + 1}"
        return f"{label}  win {session.accumulated_win:.2f}"

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        layout = self._layout()
        if layout is None:
            return
        session = self._session()
        self.header_text = self._header(session)
        metallic = session is not None and session.outcome is not None
        self._board_renderer.render(arcade, layout.metrics, metallic=metallic, headless=headless)
        if headless:
            return
        metrics = layout.metrics
        arcade.draw_text(
            self.header_text,
            metrics.offset_x,
            self.window.height - metrics.offset_y + 10,
            arcade.color.WHITE,
            12,
        )
