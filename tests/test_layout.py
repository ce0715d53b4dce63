import pytest

from tumble.config import BoardShape, ReplayConfig
from tumble.ui.layout import cell_position, compute_metrics


def test_default_container_clamps_to_max_cell_size():
    metrics = compute_metrics(BoardShape(3, 5), (640, 640))
    assert metrics.cell_size == 72
    assert metrics.padding == 12
    assert metrics.gap == 2
    assert metrics.width == 392
    assert metrics.height == 264
    assert (metrics.offset_x, metrics.offset_y) == (12, 32)


def test_narrow_container_uses_small_padding():
    metrics = compute_metrics(BoardShape(7, 5), (300, 500))
    assert metrics.padding == 8
    assert metrics.cell_size == pytest.approx(55.2)


def test_tiny_container_clamps_to_min_cell_size():
    metrics = compute_metrics(BoardShape(7, 5), (100, 100))
    assert metrics.cell_size == 20


def test_configured_clamps_are_respected():
    config = ReplayConfig(min_cell_size=30, max_cell_size=40)
    assert compute_metrics(BoardShape(3, 5), (640, 640), config).cell_size == 40
    assert compute_metrics(BoardShape(7, 5), (100, 100), config).cell_size == 30


@pytest.mark.parametrize("size", [(500, 400), (800, 600), (360, 900), (1280, 720)])
def test_board_fits_container_without_cropping(size):
    width, height = size
    shape = BoardShape(7, 5)
    metrics = compute_metrics(shape, size)
    assert metrics.grid_width <= width - 2 * metrics.padding + 1e-6
    assert metrics.grid_height <= height - 32 - 2 * metrics.padding + 1e-6


def test_height_bound_container_picks_the_smaller_size():
    metrics = compute_metrics(BoardShape(7, 5), (500, 400))
    assert metrics.cell_size == pytest.approx(340 / 7)


def test_non_positive_container_falls_back_to_default_canvas():
    shape = BoardShape(3, 5)
    assert compute_metrics(shape, (0, -5)) == compute_metrics(shape, (640, 640))


def test_offsets_are_whole_pixels_and_below_header():
    metrics = compute_metrics(BoardShape(1, 1), (333, 101))
    assert metrics.offset_x == int(metrics.offset_x)
    assert metrics.offset_y >= 32


def test_cell_positions_follow_pitch():
    metrics = compute_metrics(BoardShape(3, 5), (640, 640))
    assert metrics.pitch == 74
    assert cell_position(metrics, 0, 0) == (12, 32)
    assert cell_position(metrics, 1, 2) == (160, 106)
