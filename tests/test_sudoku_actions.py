# tests/test_sudoku_actions.py
import json

import pytest

from server_actions.sudoku_actions import process_sudoku_action
from sudoku_session import HINT_PENALTY, REVEAL_PENALTY, GameSession
from sudoku_stats import STATS_KEY


@pytest.fixture
def session(rng, clock):
    return GameSession(rng=rng, clock=clock)


def editable_cells(session):
    return [(r, c) for r in range(9) for c in range(9) if not session.fixed_mask[r][c]]


def test_new_game_action(session):
    result = process_sudoku_action(session, "NEW_GAME", {"difficulty": "hard"})
    assert result.processed
    assert session.difficulty == "hard"
    assert session.is_playing


def test_errors_become_feedback(session):
    result = process_sudoku_action(session, "SHOW_SOLUTION")
    assert not result.processed
    assert result.message == "Please start a new game first."


def test_unknown_action(session):
    result = process_sudoku_action(session, "DANCE")
    assert not result.processed


def test_select_then_place_digit(session):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    r, c = editable_cells(session)[0]
    process_sudoku_action(session, "SELECT_CELL", {"row": r, "col": c})
    assert session.selected_cell == (r, c)
    result = process_sudoku_action(session, "PLACE_DIGIT", {"digit": 3})
    assert result.processed
    assert session.user_board[r][c] == 3
    # Clicking the selected cell again deselects it
    process_sudoku_action(session, "SELECT_CELL", {"row": r, "col": c})
    assert session.selected_cell is None


def test_place_digit_needs_selection(session):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    result = process_sudoku_action(session, "PLACE_DIGIT", {"digit": 3})
    assert not result.processed


def test_win_is_saved_to_history(session, storage, clock):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "medium"})
    clock.advance(125)
    result = None
    for r, c in editable_cells(session):
        result = process_sudoku_action(
            session, "PLACE_DIGIT", {"row": r, "col": c, "digit": session.solution_board[r][c]}, storage
        )
    assert result.won
    assert result.final_score == 1763  # (1000 + 175) * 1.5 = 1762.5, rounded half up

    stats = json.loads(storage.get(STATS_KEY))
    assert stats["wins"] == 1
    assert stats["history"][0]["time"] == "02:05"
    assert stats["history"][0]["score"] == 1763
    assert stats["history"][0]["difficulty"] == "medium"


def test_check_solution_messages(session):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    result = process_sudoku_action(session, "CHECK_SOLUTION")
    assert result.processed
    assert not result.won
    assert result.message == "Keep going! The grid is not yet full."

    for r, c in editable_cells(session):
        session.user_board[r][c] = session.solution_board[r][c] % 9 + 1
    result = process_sudoku_action(session, "CHECK_SOLUTION")
    assert result.message == "Keep going! There are still incorrect numbers on the board."

    silent = process_sudoku_action(session, "CHECK_SOLUTION", {"silent": True})
    assert silent.message == ""


def test_hint_and_reveal_messages(session):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    r, c = editable_cells(session)[0]
    result = process_sudoku_action(session, "USE_HINT", {"row": r, "col": c})
    assert result.processed
    assert "2 left" in result.message

    result = process_sudoku_action(session, "SHOW_SOLUTION")
    assert result.processed
    assert session.current_score == 800 - 50 - 200

    result = process_sudoku_action(session, "CHECK_SOLUTION")
    assert not result.processed


def test_winning_hint_is_saved_to_history(session, storage):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    cells = editable_cells(session)
    for r, c in cells[:-1]:
        process_sudoku_action(session, "PLACE_DIGIT", {"row": r, "col": c, "digit": session.solution_board[r][c]}, storage)
    r, c = cells[-1]

    result = process_sudoku_action(session, "USE_HINT", {"row": r, "col": c}, storage)

    assert result.won
    assert result.final_score == 1050  # (800 - 50 + 300) * 1.0
    stats = json.loads(storage.get(STATS_KEY))
    assert stats["wins"] == 1
    assert stats["history"][0]["score"] == 1050


def test_penalty_messages_follow_constants(session):
    process_sudoku_action(session, "NEW_GAME", {"difficulty": "easy"})
    r, c = editable_cells(session)[0]
    hint = process_sudoku_action(session, "USE_HINT", {"row": r, "col": c})
    assert f"-{HINT_PENALTY} points" in hint.message
    reveal = process_sudoku_action(session, "SHOW_SOLUTION")
    assert f"-{REVEAL_PENALTY} points" in reveal.message
