import logging

from tumble.config import BoardShape
from tumble.utils.grid_ops import (
    apply_gravity,
    distinct_symbols,
    find_symbol_cells,
    in_bounds_cells,
    in_range_drop_in,
    normalize_grid,
)
from tests.helpers import as_lists, grid


def test_gravity_compacts_survivors_and_drops_symbols_in():
    shape = BoardShape(4, 3)
    board = as_lists(grid("ABC", "DEF", "GHI", "JKL"))
    after = apply_gravity(board, {(2, 0), (3, 0), (3, 1)}, {0: ("X", "Y"), 1: ("Z",)}, shape)
    assert after == as_lists(grid("XZC", "YBF", "AEI", "DHL"))


def test_gravity_leaves_unfilled_slots_empty():
    shape = BoardShape(3, 1)
    after = apply_gravity([["A"], ["B"], ["C"]], {(0, 0), (2, 0)}, {}, shape)
    assert after == [[""], [""], ["B"]]


def test_gravity_ignores_surplus_incoming_symbols():
    shape = BoardShape(2, 1)
    after = apply_gravity([["A"], ["B"]], {(1, 0)}, {0: ("P", "Q", "R")}, shape)
    assert after == [["R"], ["A"]]


def test_normalize_pads_and_clamps_with_warning(caplog):
    shape = BoardShape(2, 3)
    with caplog.at_level(logging.WARNING, logger="tumble.grid"):
        result = normalize_grid([["A", "B", "C", "D"], ["E"], ["F", "G", "H"]], shape, label="grid0")
    assert result == [["A", "B", "C"], ["E", "", ""]]
    assert "grid0" in caplog.text


def test_normalize_exact_shape_is_silent(caplog):
    shape = BoardShape(1, 2)
    with caplog.at_level(logging.WARNING, logger="tumble.grid"):
        assert normalize_grid([["A", "B"]], shape) == [["A", "B"]]
    assert caplog.text == ""


def test_normalize_missing_grid_is_empty():
    assert normalize_grid(None, BoardShape(2, 2)) == [["", ""], ["", ""]]


def test_out_of_range_cells_are_dropped_with_warning(caplog):
    shape = BoardShape(3, 3)
    with caplog.at_level(logging.WARNING, logger="tumble.grid"):
        kept = in_bounds_cells([(0, 0), (3, 0), (2, -1), (2, 2)], shape, label="removeCells")
    assert kept == {(0, 0), (2, 2)}
    assert "removeCells" in caplog.text


def test_drop_in_for_unknown_columns_is_dropped():
    kept = in_range_drop_in({0: ["A"], 5: ["B"], -1: ["C"]}, BoardShape(3, 3))
    assert kept == {0: ("A",)}


def test_distinct_symbols_keep_first_seen_order():
    assert distinct_symbols([["b", "A"], ["A", "", " c"], ["B"]]) == ["B", "A", "C"]


def test_find_symbol_cells_is_row_major():
    board = as_lists(grid("NAN", "ANA", "NNA"))
    assert find_symbol_cells(board, "N") == [(0, 0), (0, 2), (1, 1), (2, 0), (2, 1)]
