# server_actions/sudoku_actions.py
from dataclasses import dataclass
from typing import Optional

from sudoku_session import HINT_PENALTY, REVEAL_PENALTY, GameActionError, GameSession
from sudoku_stats import save_win_data


@dataclass
class ActionResult:
    processed: bool = True
    message: str = ""
    won: bool = False
    final_score: Optional[int] = None
    check: object = None


def _win_message(session: GameSession) -> str:
    return (f"🎉 Congratulations! You solved the Sudoku in {session.elapsed_display()}!\n"
            f"Your score: {session.final_score} points!")


def _record_win_if_any(session: GameSession, check_result, storage, result: ActionResult, silent: bool):
    """Fills ``result`` from a check; persists the win when one just happened."""
    result.check = check_result
    if check_result is None:
        return
    if check_result.solved and session.final_score is not None:
        result.won = True
        result.final_score = session.final_score
        result.message = _win_message(session)
        if storage is not None:
            save_win_data(storage, session.elapsed_display(), session.final_score, session.difficulty)
    elif not silent:
        if not check_result.complete:
            result.message = "Keep going! The grid is not yet full."
        else:
            result.message = "Keep going! There are still incorrect numbers on the board."


def process_sudoku_action(session: GameSession, action_type: str, payload: dict = None, storage=None) -> ActionResult:
    payload = payload or {}
    result = ActionResult()

    try:
        if action_type == "NEW_GAME":
            session.new_game(payload.get("difficulty", session.difficulty))
            result.message = f"New {session.difficulty} game started. Good luck!"

        elif action_type == "RESET_GAME":
            session.reset()
            result.message = "Puzzle reset."

        elif action_type == "SELECT_CELL":
            if session.selected_cell == (payload["row"], payload["col"]):
                session.selected_cell = None  # Second click deselects
            else:
                session.select_cell(payload["row"], payload["col"])

        elif action_type == "PLACE_DIGIT":
            row, col = payload.get("row"), payload.get("col")
            if row is None or col is None:
                if session.selected_cell is None:
                    raise GameActionError("Please select an empty cell first!")
                row, col = session.selected_cell
            check_result = session.place_digit(row, col, payload["digit"])
            _record_win_if_any(session, check_result, storage, result, silent=True)

        elif action_type == "USE_HINT":
            check_result = session.use_hint(payload.get("row"), payload.get("col"))
            result.message = f"Hint used (-{HINT_PENALTY} points). {session.hints_left} left."
            _record_win_if_any(session, check_result, storage, result, silent=True)

        elif action_type == "SHOW_SOLUTION":
            session.reveal_solution()
            result.message = f"The puzzle has been solved for you! (-{REVEAL_PENALTY} points)\nStart a New Game to try again."

        elif action_type == "CHECK_SOLUTION":
            silent = bool(payload.get("silent", False))
            if not session.is_playing:
                raise GameActionError("This game is over. Start a new game to play again.")
            _record_win_if_any(session, session.check(), storage, result, silent=silent)

        else:
            print(f"[Sudoku] Unknown action type '{action_type}', not processed.")
            result.processed = False
            result.message = f"Unknown action: {action_type}"

    except GameActionError as ex:
        result.processed = False
        result.message = str(ex)

    return result
