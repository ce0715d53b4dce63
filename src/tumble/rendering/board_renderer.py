from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Tuple

from tumble.components.cell_visual import CellVisual
from tumble.components.visual_effect import VisualEffect
from tumble.rendering.palette import cell_fills, hex_to_rgb, lighten, symbol_color

if TYPE_CHECKING:
    from tumble.systems.render import RenderSystem
    from tumble.ui.layout import Metrics

Rect = Tuple[float, float, float, float]


def _alpha(value: float) -> int:
    return max(0, min(255, round(value * 255)))


class BoardRenderer:
    """Draws cell visuals and effects; canvas y grows down, arcade y grows up."""

    def __init__(self, render_system: RenderSystem):
        self._rs = render_system
        self.last_cell_rects: Dict[int, Rect] = {}
        self.last_effects: List[Tuple[str, float, float]] = []

    def fills_for(self, symbol: str, *, metallic: bool) -> Dict[str, Tuple[int, int, int]]:
        return cell_fills(symbol, metallic=metallic, overrides=self._rs.symbol_colors)

    def _flip(self, y: float) -> float:
        return self._rs.window.height - y

    def render(self, arcade, metrics: Metrics, *, metallic: bool, headless: bool) -> None:
        world = self._rs.world
        size = metrics.cell_size
        self.last_cell_rects = {}
        for ent, visual in world.get_component(CellVisual):
            extent = size * max(0.0, visual.scale)
            cx = visual.x + size / 2
            cy = self._flip(visual.y + size / 2)
            rect = (cx - extent / 2, cx + extent / 2, cy - extent / 2, cy + extent / 2)
            self.last_cell_rects[ent] = rect
            if headless or visual.alpha <= 0 or extent <= 0:
                continue
            fills = self.fills_for(visual.symbol, metallic=metallic)
            alpha = _alpha(visual.alpha * 0.95)
            left, right, bottom, top = rect
            arcade.draw_lrbt_rectangle_filled(left, right, bottom, top, (*fills["base"], alpha))
            arcade.draw_lrbt_rectangle_filled(
                left + 2, right - 2, bottom + extent * 0.55, top - 2, (*fills["highlight"], _alpha(visual.alpha * 0.35))
            )
            arcade.draw_lrbt_rectangle_filled(
                left + 2, right - 2, bottom + 2, bottom + extent * 0.3, (*fills["shade"], _alpha(visual.alpha * 0.25))
            )
            arcade.draw_lrbt_rectangle_outline(left, right, bottom, top, (*fills["glow"], _alpha(visual.alpha * 0.9)), 2)
            if visual.symbol:
                arcade.draw_text(
                    visual.symbol,
                    cx,
                    cy,
                    (255, 255, 255, alpha),
                    max(8, int(extent * 0.42)),
                    anchor_x="center",
                    anchor_y="center",
                    bold=True,
                )

        self.last_effects = []
        for _, effect in world.get_component(VisualEffect):
            self.last_effects.append((effect.kind, effect.x, effect.y))
            if headless:
                continue
            self._render_effect(arcade, effect, size)

    def _render_effect(self, arcade, effect: VisualEffect, size: float) -> None:
        rgb = hex_to_rgb(symbol_color(effect.color_seed, self._rs.symbol_colors))
        fade = 1.0 - effect.progress
        cx = effect.x + size / 2
        cy = self._flip(effect.y + size / 2)
        if effect.kind == "contour":
            half = size / 2 + 2
            arcade.draw_lrbt_rectangle_outline(
                cx - half, cx + half, cy - half, cy + half, (*lighten(rgb, 0.7), _alpha(fade)), 3
            )
        elif effect.kind == "explosion":
            radius = size * (0.3 + 0.5 * effect.progress)
            arcade.draw_circle_filled(cx, cy, radius, (*lighten(rgb, 0.55), _alpha(fade * 0.8)))
            arcade.draw_circle_outline(cx, cy, radius * 1.2, (*lighten(rgb, 0.35), _alpha(fade)), 2)
        else:
            radius = size * (0.5 + 0.2 * effect.progress)
            arcade.draw_circle_outline(cx, cy, radius, (*lighten(rgb, 0.72), _alpha(fade)), 3)
