# tests/test_sudoku_game.py
import pytest

ft = pytest.importorskip("flet")

from sudoku_game import EXAMPLE_PUZZLE, build_example_grid, is_related_cell, key_to_digit  # noqa: E402


@pytest.mark.parametrize(
    "key, expected",
    [("5", 5), ("Numpad 7", 7), ("Backspace", 0), ("Delete", 0), ("0", 0), ("A", None), ("F1", None), ("", None)],
)
def test_key_to_digit(key, expected):
    assert key_to_digit(key) == expected


def test_related_cells_share_row_column_or_box():
    assert is_related_cell((4, 4), 4, 0)
    assert is_related_cell((4, 4), 0, 4)
    assert is_related_cell((4, 4), 3, 5)
    assert not is_related_cell((4, 4), 0, 0)
    assert not is_related_cell(None, 4, 4)


def test_example_grid_shows_givens_only():
    grid = build_example_grid(EXAMPLE_PUZZLE)
    assert len(grid.controls) == 9
    for r, row in enumerate(grid.controls):
        assert len(row.controls) == 9
        for c, cell in enumerate(row.controls):
            value = EXAMPLE_PUZZLE[r][c]
            assert cell.content.value == (str(value) if value else "")
