from __future__ import annotations

import logging

from esper import World

from tumble.components.grid_state import GridState
from tumble.components.layout_state import LayoutState
from tumble.config import BoardShape, ReplayConfig
from tumble.constants import DEFAULT_CONTAINER_HEIGHT, DEFAULT_CONTAINER_WIDTH
from tumble.events.bus import EVENT_METRICS_CHANGED, EVENT_RESIZE, EventBus
from tumble.rendering.cell_renderer import CellRenderer
from tumble.ui.layout import Metrics, cell_position, compute_metrics

logger = logging.getLogger("tumble.layout")


class LayoutSystem:
    """Keeps board metrics in sync with the container and the board shape.

    A resize only moves visuals; the running sequence is left alone.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        renderer: CellRenderer,
        *,
        config: ReplayConfig | None = None,
        container_size: tuple[float, float] = (DEFAULT_CONTAINER_WIDTH, DEFAULT_CONTAINER_HEIGHT),
    ):
        self.world = world
        self.event_bus = event_bus
        self.renderer = renderer
        self.config = config or ReplayConfig()
        width, height = container_size
        metrics = compute_metrics(self.config.board_shape, (width, height), self.config)
        self.entity = world.create_entity(LayoutState(width, height, metrics))
        self.event_bus.subscribe(EVENT_RESIZE, self.on_resize)

    @property
    def state(self) -> LayoutState:
        return self.world.component_for_entity(self.entity, LayoutState)

    @property
    def metrics(self) -> Metrics:
        return self.state.metrics

    def metrics_for(self, shape: BoardShape) -> Metrics:
        """Metrics for ``shape``, recomputed when the board shape changed."""
        state = self.state
        if (state.metrics.rows, state.metrics.cols) != (shape.rows, shape.cols):
            self._update(compute_metrics(shape, (state.container_width, state.container_height), self.config))
        return state.metrics

    def _update(self, metrics: Metrics) -> None:
        self.state.metrics = metrics
        self.event_bus.emit(EVENT_METRICS_CHANGED, metrics=metrics)

    def _grid(self) -> GridState | None:
        for _, grid in self.world.get_component(GridState):
            return grid
        return None

    def on_resize(self, sender, **kwargs):
        width = kwargs.get('width', 0)
        height = kwargs.get('height', 0)
        state = self.state
        state.container_width = width
        state.container_height = height
        grid = self._grid()
        if grid is not None and grid.rows and grid.cols:
            shape = BoardShape(grid.rows, grid.cols)
        else:
            shape = BoardShape(state.metrics.rows, state.metrics.cols)
        metrics = compute_metrics(shape, (width, height), self.config)
        logger.debug("Resize to %sx%s: cell %.1f", width, height, metrics.cell_size)
        self._update(metrics)
        if grid is None:
            return
        for (row, col), handle in grid.handles.items():
            x, y = cell_position(metrics, row, col)
            self.renderer.move_visual(handle, x, y)
