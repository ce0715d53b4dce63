from tumble.rendering.palette import cell_fills
from tumble.systems.render import RenderSystem
from tests.helpers import drive, grid, make_engine, outcome


class DummyWindow:
    def __init__(self, width=640, height=600):
        self.width = width
        self.height = height


def test_header_before_and_after_a_play():
    engine = make_engine()
    render = RenderSystem(engine.world, engine.event_bus, DummyWindow())
    render.process()
    assert render.header_text == "Waiting for play"
    engine.lifecycle.submit(outcome(grid("ABCDE", "FGHIJ", "KLMNO"), outcome_id="p-3"))
    render.process()
    assert render.header_text == "Play p-3  win 0.00"


def test_cell_rects_are_flipped_into_window_space():
    engine = make_engine()
    render = RenderSystem(engine.world, engine.event_bus, DummyWindow())
    engine.lifecycle.submit(outcome(grid("ABCDE", "FGHIJ", "KLMNO")))
    drive(engine.event_bus, 1.0)
    render.process()
    rects = render.board_renderer.last_cell_rects
    assert len(rects) == 15
    handle = engine.lifecycle.grid.handles[(0, 0)]
    left, right, bottom, top = rects[handle]
    # Cell (0, 0) sits at canvas (12, 32) with 72px cells.
    assert (round(left), round(right)) == (12, 84)
    assert (round(bottom), round(top)) == (496, 568)


def test_effects_are_collected_while_alive():
    engine = make_engine()
    render = RenderSystem(engine.world, engine.event_bus, DummyWindow())
    engine.renderer.play_effect("explosion", 10.0, 20.0, "A")
    render.process()
    assert render.board_renderer.last_effects == [("explosion", 10.0, 20.0)]
    drive(engine.event_bus, 1.0)
    render.process()
    assert render.board_renderer.last_effects == []


def test_paytable_palette_colors_cells():
    engine = make_engine()
    render = RenderSystem(engine.world, engine.event_bus, DummyWindow(), symbol_colors={"A": "#000000"})
    board = render.board_renderer
    assert board.fills_for("A", metallic=True) == cell_fills("A", metallic=True, overrides={"A": "#000000"})
    assert board.fills_for("A", metallic=True)["base"] == (0, 0, 0)
    assert board.fills_for("B", metallic=False) == cell_fills("B", metallic=False)
