# sudoku_session.py
import random

from game_timer import Stopwatch, format_elapsed
from sudoku_utils import (
    DEFAULT_DIFFICULTY,
    GRID_SIZE,
    SudokuGenerator,
    calculate_score,
    check_solution,
    copy_board,
    current_score,
    difficulty_settings,
    find_mismatches,
    fixed_mask_from_puzzle,
    is_complete,
)

HINTS_PER_GAME = 3
HINT_PENALTY = 50
REVEAL_PENALTY = 200

# Steps: idle -> playing -> (won | solution_shown)
STEP_IDLE = "idle"
STEP_PLAYING = "playing"
STEP_WON = "won"
STEP_SOLUTION_SHOWN = "solution_shown"


class GameActionError(Exception):
    """A player action that cannot be applied to the current session."""


class GameSession:
    def __init__(self, rng=None, clock=None, max_steps=None):
        self.rng = rng or random.Random()
        self.max_steps = max_steps
        self.stopwatch = Stopwatch(clock) if clock else Stopwatch()
        self.difficulty = DEFAULT_DIFFICULTY
        self.step = STEP_IDLE
        self.solution_board = None
        self.puzzle_board = None
        self.user_board = None
        self.fixed_mask = None
        self.selected_cell = None
        self.base_score = difficulty_settings(DEFAULT_DIFFICULTY)["base_score"]
        self.penalty = 0
        self.hints_left = HINTS_PER_GAME
        self.final_score = None

    # --- lifecycle ---
    def new_game(self, difficulty=DEFAULT_DIFFICULTY):
        settings = difficulty_settings(difficulty)
        generator = SudokuGenerator(rng=self.rng, max_steps=self.max_steps)
        self.difficulty = difficulty
        self.solution_board = generator.generate_filled_grid()
        self.puzzle_board = generator.create_puzzle(self.solution_board, difficulty)
        self.base_score = settings["base_score"]
        self.hints_left = HINTS_PER_GAME
        self._restart_from_puzzle()
        print(f"[Sudoku] New {difficulty} game, {self.clue_count()} clues.")
        return self

    def reset(self):
        self._require_puzzle()
        self._restart_from_puzzle()
        return self

    def _restart_from_puzzle(self):
        self.user_board = copy_board(self.puzzle_board)
        self.fixed_mask = fixed_mask_from_puzzle(self.puzzle_board)
        self.selected_cell = None
        self.penalty = 0
        self.final_score = None
        self.step = STEP_PLAYING
        self.stopwatch.start()

    # --- queries ---
    @property
    def has_puzzle(self):
        return self.solution_board is not None

    @property
    def is_playing(self):
        return self.step == STEP_PLAYING

    @property
    def multiplier(self):
        return difficulty_settings(self.difficulty)["multiplier"]

    @property
    def current_score(self):
        if self.step == STEP_WON and self.final_score is not None:
            return self.final_score
        return current_score(self.base_score, self.penalty)

    def elapsed_seconds(self):
        return self.stopwatch.elapsed_seconds()

    def elapsed_display(self):
        return format_elapsed(self.elapsed_seconds())

    def clue_count(self):
        return sum(1 for row in self.puzzle_board for value in row if value != 0)

    def is_fixed(self, row, col):
        return bool(self.fixed_mask and self.fixed_mask[row][col])

    def is_complete(self):
        self._require_puzzle()
        return is_complete(self.user_board, self.fixed_mask)

    def mismatches(self):
        if not self.has_puzzle:
            return set()
        return find_mismatches(self.user_board, self.solution_board, self.fixed_mask)

    def next_editable_cell(self, row, col):
        """First non-fixed cell after (row, col) in reading order, wrapping around."""
        start = row * GRID_SIZE + col + 1
        for offset in range(GRID_SIZE * GRID_SIZE):
            index = (start + offset) % (GRID_SIZE * GRID_SIZE)
            r, c = divmod(index, GRID_SIZE)
            if not self.fixed_mask[r][c]:
                return r, c
        return None

    # --- player actions ---
    def select_cell(self, row, col):
        self._require_playing()
        self._check_cell(row, col)
        if self.fixed_mask[row][col]:
            self.selected_cell = None
            raise GameActionError("This cell is fixed.")
        self.selected_cell = (row, col)
        return self.selected_cell

    def place_digit(self, row, col, digit):
        """Writes ``digit`` (0 clears) and returns the silent check result."""
        self._require_playing()
        self._check_cell(row, col)
        if not isinstance(digit, int) or not 0 <= digit <= 9:
            raise ValueError(f"Digit must be 0-9, got {digit!r}")
        if self.fixed_mask[row][col]:
            raise GameActionError("This cell is fixed.")
        self.user_board[row][col] = digit
        if self.is_complete():
            return self.check()
        return None

    def use_hint(self, row=None, col=None):
        self._require_playing()
        if self.hints_left <= 0:
            raise GameActionError("No hints remaining!")
        if row is None or col is None:
            if self.selected_cell is None:
                raise GameActionError("Please select an empty cell first!")
            row, col = self.selected_cell
        self._check_cell(row, col)
        if self.fixed_mask[row][col]:
            raise GameActionError("Please select an empty cell first!")
        if self.user_board[row][col] == self.solution_board[row][col]:
            raise GameActionError("This cell is already correct!")

        self.penalty += HINT_PENALTY
        self.user_board[row][col] = self.solution_board[row][col]
        self.fixed_mask[row][col] = True
        self.hints_left -= 1

        result = self.check() if self.is_complete() else None
        if self.is_playing:
            self.selected_cell = self.next_editable_cell(row, col)
        else:
            self.selected_cell = None
        return result

    def reveal_solution(self):
        self._require_puzzle()
        if self.step == STEP_SOLUTION_SHOWN:
            raise GameActionError("The solution is already shown.")
        self.penalty += REVEAL_PENALTY
        self.final_score = None
        self.stopwatch.stop()
        self.user_board = copy_board(self.solution_board)
        self.fixed_mask = [[True] * GRID_SIZE for _ in range(GRID_SIZE)]
        self.selected_cell = None
        self.step = STEP_SOLUTION_SHOWN
        print(f"[Sudoku] Solution revealed, score now {self.current_score}.")
        return self.user_board

    def check(self):
        self._require_puzzle()
        result = check_solution(self.user_board, self.solution_board, self.fixed_mask)
        if result.solved and self.is_playing:
            self.stopwatch.stop()
            self.final_score = calculate_score(
                self.base_score, self.penalty, self.elapsed_seconds(), self.multiplier
            )
            self.step = STEP_WON
            self.selected_cell = None
            print(f"[Sudoku] Solved {self.difficulty} in {self.elapsed_display()}, score {self.final_score}.")
        return result

    def to_dict(self):
        return {
            "difficulty": self.difficulty,
            "step": self.step,
            "user_board": copy_board(self.user_board),
            "fixed_mask": [row[:] for row in self.fixed_mask] if self.fixed_mask else None,
            "selected_cell": self.selected_cell,
            "score": self.current_score,
            "penalty": self.penalty,
            "hints_left": self.hints_left,
            "elapsed": self.elapsed_display(),
        }

    # --- guards ---
    def _require_puzzle(self):
        if not self.has_puzzle:
            raise GameActionError("Please start a new game first.")

    def _require_playing(self):
        self._require_puzzle()
        if not self.is_playing:
            raise GameActionError("This game is over. Start a new game to play again.")

    @staticmethod
    def _check_cell(row, col):
        if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
            raise ValueError(f"Cell ({row}, {col}) is outside the 9x9 grid")
