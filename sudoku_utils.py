# sudoku_utils.py
import math
import random
from dataclasses import dataclass, field

GRID_SIZE = 9
BOX_SIZE = 3

# difficulty: (cells removed, score multiplier, base score)
DIFFICULTY_SETTINGS = {
    "easy": {"remove": 40, "multiplier": 1.0, "base_score": 800},
    "medium": {"remove": 50, "multiplier": 1.5, "base_score": 1000},
    "hard": {"remove": 60, "multiplier": 2.0, "base_score": 1200},
}
DEFAULT_DIFFICULTY = "medium"

TIME_BONUS_WINDOW = 300  # seconds; no bonus after 5 minutes


class GenerationBudgetExceeded(Exception):
    """Raised inside a budgeted fill attempt; the generator restarts from scratch."""


def shuffle(items, rng=None):
    """Fisher-Yates shuffle of a copy of ``items``."""
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def _check_coords(row, col):
    if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
        raise ValueError(f"Cell ({row}, {col}) is outside the 9x9 grid")


def _check_candidate(digit):
    if not isinstance(digit, int) or not 1 <= digit <= GRID_SIZE:
        raise ValueError(f"Candidate digit must be 1-9, got {digit!r}")


def is_valid(grid, row: int, col: int, digit: int) -> bool:
    _check_coords(row, col)
    _check_candidate(digit)
    # Row and column
    for i in range(GRID_SIZE):
        if grid[row][i] == digit or grid[i][col] == digit:
            return False
    # 3x3 box
    start_row, start_col = (row // BOX_SIZE) * BOX_SIZE, (col // BOX_SIZE) * BOX_SIZE
    for i in range(BOX_SIZE):
        for j in range(BOX_SIZE):
            if grid[start_row + i][start_col + j] == digit:
                return False
    return True


class SudokuGenerator:
    def __init__(self, rng=None, max_steps=None, max_attempts=5):
        self.rng = rng or random
        self.max_steps = max_steps
        self.max_attempts = max_attempts
        self._steps = 0
        self._budget = None

    def _fill_grid_recursive(self, grid_ref):  # Works on a reference to the grid
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                if grid_ref[r][c] == 0:
                    for num in shuffle(range(1, GRID_SIZE + 1), self.rng):
                        if is_valid(grid_ref, r, c, num):
                            grid_ref[r][c] = num
                            self._steps += 1
                            if self._budget is not None and self._steps > self._budget:
                                raise GenerationBudgetExceeded()
                            if self._fill_grid_recursive(grid_ref):  # Recurse
                                return True
                            grid_ref[r][c] = 0  # Backtrack
                    return False  # No valid number found
        return True  # Grid is filled

    def _attempt(self, budget):
        new_grid = empty_board()
        self._steps = 0
        self._budget = budget
        try:
            self._fill_grid_recursive(new_grid)
        finally:
            self._budget = None
        return new_grid

    def generate_filled_grid(self):
        if self.max_steps is not None:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    return self._attempt(self.max_steps)
                except GenerationBudgetExceeded:
                    print(f"[Sudoku] Fill attempt {attempt} passed {self.max_steps} steps, restarting.")
        # An unbounded search always completes an empty 9x9 grid
        return self._attempt(None)

    def create_puzzle(self, solved_grid, difficulty=DEFAULT_DIFFICULTY):
        cells_to_remove = removal_count(difficulty)
        puzzle = copy_board(solved_grid)

        all_cells = shuffle([(r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE)], self.rng)
        cells_removed = 0
        for r, c in all_cells:
            if cells_removed >= cells_to_remove:
                break
            if puzzle[r][c] != 0:
                puzzle[r][c] = 0
                cells_removed += 1
        return puzzle


def difficulty_settings(difficulty):
    return DIFFICULTY_SETTINGS.get(difficulty, DIFFICULTY_SETTINGS[DEFAULT_DIFFICULTY])


def removal_count(difficulty) -> int:
    return difficulty_settings(difficulty)["remove"]


def generate_solved_grid(rng=None, max_steps=None):
    return SudokuGenerator(rng=rng, max_steps=max_steps).generate_filled_grid()


def create_puzzle(solved_grid, difficulty=DEFAULT_DIFFICULTY, rng=None):
    return SudokuGenerator(rng=rng).create_puzzle(solved_grid, difficulty)


def fixed_mask_from_puzzle(puzzle):
    return [[value != 0 for value in row] for row in puzzle]


def is_complete(grid, fixed_mask) -> bool:
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if not fixed_mask[r][c] and grid[r][c] == 0:
                return False
    return True


def find_mismatches(grid, solved_grid, fixed_mask):
    """Editable cells holding a digit that differs from the solution."""
    mismatches = set()
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if fixed_mask[r][c]:
                continue
            value = grid[r][c]
            if value != 0 and value != solved_grid[r][c]:
                mismatches.add((r, c))
    return mismatches


@dataclass
class SolutionCheck:
    complete: bool
    all_correct: bool
    mismatches: set = field(default_factory=set)

    @property
    def solved(self):
        return self.complete and self.all_correct


def check_solution(grid, solved_grid, fixed_mask) -> SolutionCheck:
    all_correct = True
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if fixed_mask[r][c]:
                continue
            if grid[r][c] == 0 or grid[r][c] != solved_grid[r][c]:
                all_correct = False
    return SolutionCheck(
        complete=is_complete(grid, fixed_mask),
        all_correct=all_correct,
        mismatches=find_mismatches(grid, solved_grid, fixed_mask),
    )


def round_half_up(value) -> int:
    return int(math.floor(value + 0.5))


def current_score(base_score, penalty) -> int:
    return max(0, base_score - penalty)


def calculate_score(base_score, penalty, elapsed_seconds, multiplier) -> int:
    time_bonus = max(0, TIME_BONUS_WINDOW - elapsed_seconds)
    raw_score = max(0, base_score - penalty + time_bonus)
    return round_half_up(raw_score * multiplier)


def is_valid_solution(grid) -> bool:
    """True when every row, column and box is a permutation of 1..9."""
    target = set(range(1, GRID_SIZE + 1))
    for i in range(GRID_SIZE):
        if set(grid[i]) != target:
            return False
        if {grid[r][i] for r in range(GRID_SIZE)} != target:
            return False
    for box_r in range(0, GRID_SIZE, BOX_SIZE):
        for box_c in range(0, GRID_SIZE, BOX_SIZE):
            box = {grid[r][c] for r in range(box_r, box_r + BOX_SIZE) for c in range(box_c, box_c + BOX_SIZE)}
            if box != target:
                return False
    return True


def empty_board():
    return [[0 for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


def copy_board(board):
    if not board: return None
    return [row[:] for row in board]
