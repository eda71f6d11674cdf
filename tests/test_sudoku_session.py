# tests/test_sudoku_session.py
import pytest

from sudoku_session import (
    HINT_PENALTY,
    HINTS_PER_GAME,
    REVEAL_PENALTY,
    STEP_PLAYING,
    STEP_SOLUTION_SHOWN,
    STEP_WON,
    GameActionError,
    GameSession,
)
from sudoku_utils import is_valid_solution


def editable_cells(session):
    return [(r, c) for r in range(9) for c in range(9) if not session.fixed_mask[r][c]]


def fill_with_solution(session):
    result = None
    for r, c in editable_cells(session):
        result = session.place_digit(r, c, session.solution_board[r][c])
    return result


@pytest.fixture
def session(rng, clock):
    return GameSession(rng=rng, clock=clock)


def test_new_game_sets_up_scores_and_board(session):
    session.new_game("hard")
    assert is_valid_solution(session.solution_board)
    assert session.clue_count() == 21
    assert session.base_score == 1200
    assert session.current_score == 1200
    assert session.hints_left == HINTS_PER_GAME
    assert session.step == STEP_PLAYING
    assert session.user_board == session.puzzle_board
    assert session.user_board is not session.puzzle_board


def test_actions_before_new_game_are_rejected(session):
    with pytest.raises(GameActionError):
        session.reveal_solution()
    with pytest.raises(GameActionError):
        session.use_hint(0, 0)


def test_easy_game_end_to_end(session, clock):
    session.new_game("easy")
    assert session.clue_count() == 41
    clock.advance(60)

    result = fill_with_solution(session)

    assert result.complete and result.all_correct
    assert session.step == STEP_WON
    assert session.final_score == 1040  # (800 + 240) * 1.0
    assert session.current_score == session.final_score


def test_clock_freezes_after_win(session, clock):
    session.new_game("easy")
    clock.advance(42)
    fill_with_solution(session)
    clock.advance(100)
    assert session.elapsed_seconds() == 42
    assert session.elapsed_display() == "00:42"


def test_wrong_digit_does_not_win(session):
    session.new_game("medium")
    cells = editable_cells(session)
    for r, c in cells[:-1]:
        session.place_digit(r, c, session.solution_board[r][c])
    r, c = cells[-1]
    wrong = session.solution_board[r][c] % 9 + 1
    result = session.place_digit(r, c, wrong)
    assert result.complete
    assert not result.all_correct
    assert result.mismatches == {(r, c)}
    assert session.step == STEP_PLAYING
    assert session.mismatches() == {(r, c)}


def test_place_digit_rejects_fixed_and_bad_digits(session):
    session.new_game("easy")
    fixed = next((r, c) for r in range(9) for c in range(9) if session.fixed_mask[r][c])
    with pytest.raises(GameActionError):
        session.place_digit(*fixed, 1)
    r, c = editable_cells(session)[0]
    with pytest.raises(ValueError):
        session.place_digit(r, c, 10)
    session.place_digit(r, c, 4)
    session.place_digit(r, c, 0)
    assert session.user_board[r][c] == 0


def test_hint_costs_points_and_allowance(session):
    session.new_game("medium")
    r, c = editable_cells(session)[0]
    session.use_hint(r, c)
    assert session.hints_left == HINTS_PER_GAME - 1
    assert session.penalty == HINT_PENALTY
    assert session.current_score == 1000 - HINT_PENALTY
    assert session.user_board[r][c] == session.solution_board[r][c]
    assert session.is_fixed(r, c)


def test_hint_moves_selection_to_next_editable_cell(session):
    session.new_game("medium")
    first, second = editable_cells(session)[:2]
    session.select_cell(*first)
    session.use_hint()
    assert session.selected_cell == second


def test_hint_on_correct_cell_is_free(session):
    session.new_game("medium")
    r, c = editable_cells(session)[0]
    session.place_digit(r, c, session.solution_board[r][c])
    with pytest.raises(GameActionError):
        session.use_hint(r, c)
    assert session.hints_left == HINTS_PER_GAME
    assert session.penalty == 0


def test_hints_run_out(session):
    session.new_game("hard")
    cells = editable_cells(session)
    for r, c in cells[:HINTS_PER_GAME]:
        session.use_hint(r, c)
    with pytest.raises(GameActionError):
        session.use_hint(*cells[HINTS_PER_GAME])
    assert session.penalty == HINTS_PER_GAME * HINT_PENALTY


def test_hint_without_selection(session):
    session.new_game("easy")
    with pytest.raises(GameActionError):
        session.use_hint()


def test_reveal_solution(session):
    session.new_game("medium")
    session.reveal_solution()
    assert session.step == STEP_SOLUTION_SHOWN
    assert session.user_board == session.solution_board
    assert all(all(row) for row in session.fixed_mask)
    assert session.penalty == REVEAL_PENALTY
    assert session.current_score == 800
    with pytest.raises(GameActionError):
        session.place_digit(0, 0, 1)


def test_reset_restores_puzzle_but_keeps_hint_count(session, clock):
    session.new_game("easy")
    cells = editable_cells(session)
    session.use_hint(*cells[0])
    session.place_digit(*cells[1], 7)
    clock.advance(30)

    session.reset()

    assert session.user_board == session.puzzle_board
    assert not session.is_fixed(*cells[0])
    assert session.penalty == 0
    assert session.hints_left == HINTS_PER_GAME - 1
    assert session.elapsed_seconds() == 0


def test_next_editable_cell_wraps(session):
    session.new_game("easy")
    cells = editable_cells(session)
    last = cells[-1]
    assert session.next_editable_cell(*last) == cells[0]


def test_to_dict_snapshot(session):
    session.new_game("easy")
    snapshot = session.to_dict()
    assert snapshot["difficulty"] == "easy"
    assert snapshot["score"] == 800
    assert snapshot["elapsed"] == "00:00"
    snapshot["user_board"][0][0] = 99
    assert session.user_board[0][0] != 99


def test_reveal_after_win_drops_score_to_base_minus_penalty(session):
    session.new_game("easy")
    fill_with_solution(session)
    assert session.current_score == 1100  # (800 + 300) * 1.0

    session.reveal_solution()

    assert session.step == STEP_SOLUTION_SHOWN
    assert session.final_score is None
    assert session.penalty == REVEAL_PENALTY
    assert session.current_score == 800 - REVEAL_PENALTY


def test_hint_on_last_empty_cell_wins(session, clock):
    session.new_game("easy")
    cells = editable_cells(session)
    for r, c in cells[:-1]:
        session.place_digit(r, c, session.solution_board[r][c])
    clock.advance(100)

    result = session.use_hint(*cells[-1])

    assert result.complete and result.all_correct
    assert session.step == STEP_WON
    assert session.selected_cell is None
    assert session.final_score == 800 - HINT_PENALTY + 200  # time bonus 300 - 100, x1.0


def test_unknown_difficulty_uses_medium_scoring(session):
    session.new_game("nightmare")
    assert session.clue_count() == 31
    assert session.base_score == 1000
    assert session.multiplier == 1.5
    assert session.current_score == 1000

    fill_with_solution(session)

    assert session.final_score == 1950  # (1000 + 300) * 1.5
