# sudoku_game.py
import flet as ft

from game_timer import start_game_timer, stop_game_timer
from server_actions.sudoku_actions import process_sudoku_action
from sudoku_session import GameSession, HINT_PENALTY
from sudoku_utils import BOX_SIZE, DIFFICULTY_SETTINGS, GRID_SIZE

# --- Sizing Constants ---
FONT_SIZE_NORMAL = 14
FONT_SIZE_MEDIUM = 16
FONT_SIZE_LARGE = 18
FONT_SIZE_XLARGE = 20 # For cell numbers
FONT_SIZE_TITLE = 22
BUTTON_HEIGHT_NORMAL = 40
TITLE_ICON_SIZE = 26
SUDOKU_CELL_SIZE = 38
SUDOKU_GRID_BORDER_THICKNESS_NORMAL = 1
SUDOKU_GRID_BORDER_THICKNESS_BOLD = 2.5
NUMBER_PALETTE_BUTTON_SIZE = 40

USER_ENTERED_COLOR = ft.Colors.BLUE_800
INITIAL_NUMBER_COLOR = ft.Colors.BLACK87
ERROR_NUMBER_COLOR = ft.Colors.RED_ACCENT_700
DEFAULT_BORDER_COLOR = ft.Colors.BLACK54
SELECTED_CELL_BG_COLOR = ft.Colors.LIGHT_BLUE_ACCENT_100
RELATED_CELL_BG_COLOR = ft.Colors.BLUE_50
INITIAL_CELL_BG_COLOR = ft.Colors.BLUE_GREY_50
NORMAL_CELL_BG_COLOR = ft.Colors.WHITE
HINT_BUTTON_COLOR = ft.Colors.PURPLE

DIFFICULTY_LABELS = {"easy": "Easy", "medium": "Medium", "hard": "Hard"}

CLEAR_KEYS = {"Backspace", "Delete", "0"}


def key_to_digit(key: str):
    """Maps a Flet keyboard key to 1-9, 0 for clear keys, None otherwise."""
    if key in CLEAR_KEYS:
        return 0
    last = key[-1:] if key else ""
    if last.isdigit() and (key == last or key.startswith("Numpad")):
        return int(last)
    return None


def cell_border(r, c, color=DEFAULT_BORDER_COLOR):
    def side(is_bold):
        return ft.border.BorderSide(SUDOKU_GRID_BORDER_THICKNESS_BOLD if is_bold else SUDOKU_GRID_BORDER_THICKNESS_NORMAL, color)
    return ft.border.Border(
        top=side(r % BOX_SIZE == 0),
        left=side(c % BOX_SIZE == 0),
        right=side(c == GRID_SIZE - 1 or c % BOX_SIZE == BOX_SIZE - 1),
        bottom=side(r == GRID_SIZE - 1 or r % BOX_SIZE == BOX_SIZE - 1),
    )


EXAMPLE_PUZZLE = [
    [5, 3, 0, 0, 7, 0, 0, 0, 0],
    [6, 0, 0, 1, 9, 5, 0, 0, 0],
    [0, 9, 8, 0, 0, 0, 0, 6, 0],
    [8, 0, 0, 0, 6, 0, 0, 0, 3],
    [4, 0, 0, 8, 0, 3, 0, 0, 1],
    [7, 0, 0, 0, 2, 0, 0, 0, 6],
    [0, 6, 0, 0, 0, 0, 2, 8, 0],
    [0, 0, 0, 4, 1, 9, 0, 0, 5],
    [0, 0, 0, 0, 8, 0, 0, 7, 9],
]
EXAMPLE_CELL_SIZE = 28


def build_example_grid(board=EXAMPLE_PUZZLE, cell_size=EXAMPLE_CELL_SIZE):
    """Read-only grid for the how-to-play page."""
    grid_rows = []
    for r_idx in range(GRID_SIZE):
        row_controls = []
        for c_idx in range(GRID_SIZE):
            value = board[r_idx][c_idx]
            row_controls.append(ft.Container(
                content=ft.Text(str(value) if value else "", size=FONT_SIZE_NORMAL,
                                weight=ft.FontWeight.BOLD, color=INITIAL_NUMBER_COLOR),
                width=cell_size, height=cell_size,
                alignment=ft.alignment.center,
                bgcolor=INITIAL_CELL_BG_COLOR if value else NORMAL_CELL_BG_COLOR,
                border=cell_border(r_idx, c_idx),
            ))
        grid_rows.append(ft.Row(row_controls, spacing=0, alignment=ft.MainAxisAlignment.CENTER))
    return ft.Column(grid_rows, spacing=0, horizontal_alignment=ft.CrossAxisAlignment.CENTER)


def is_related_cell(selected, r, c):
    if selected is None:
        return False
    sr, sc = selected
    same_box = sr // BOX_SIZE == r // BOX_SIZE and sc // BOX_SIZE == c // BOX_SIZE
    return sr == r or sc == c or same_box


def sudoku_game_logic(page: ft.Page, go_home_fn, go_stats_fn, session: GameSession, difficulty: str):
    timer_state = page.data.setdefault("sudoku_timer", {"event": None})

    status_text = ft.Text("", size=FONT_SIZE_MEDIUM, text_align=ft.TextAlign.CENTER)
    timer_text = ft.Text("00:00", size=FONT_SIZE_LARGE, weight=ft.FontWeight.BOLD)
    score_text = ft.Text("", size=FONT_SIZE_LARGE, weight=ft.FontWeight.BOLD)
    hints_text = ft.Text("", size=FONT_SIZE_NORMAL)
    hint_button = ft.ElevatedButton("", on_click=lambda e: handle_hint(), height=BUTTON_HEIGHT_NORMAL)
    difficulty_dropdown = ft.Dropdown(
        value=difficulty, width=150,
        options=[ft.dropdown.Option(key, DIFFICULTY_LABELS.get(key, key)) for key in DIFFICULTY_SETTINGS],
    )
    sudoku_grid_container = ft.Column(spacing=0, horizontal_alignment=ft.CrossAxisAlignment.CENTER)
    number_palette = ft.Column(horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=5)
    text_controls = [[None for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]

    def show_message(message):
        if message and page.client_storage:
            page.open(ft.SnackBar(ft.Text(message)))

    def show_dialog(title, message):
        dialog = ft.AlertDialog(
            title=ft.Text(title), content=ft.Text(message),
            actions=[ft.TextButton("OK", on_click=lambda e: page.close(dialog))],
        )
        page.open(dialog)

    # --- timer ---
    def on_timer_tick():
        timer_text.value = session.elapsed_display()
        if page.client_storage:
            page.update()

    def restart_timer():
        stop_game_timer(timer_state["event"], "sudoku")
        timer_state["event"] = start_game_timer(on_timer_tick, 1.0, "sudoku")

    def stop_timer():
        stop_game_timer(timer_state["event"], "sudoku")
        timer_state["event"] = None

    # --- rendering ---
    def update_cell_display(r, c, mismatches):
        cell_text_control = text_controls[r][c]
        if not cell_text_control:
            return
        value = session.user_board[r][c]
        is_fixed = session.is_fixed(r, c)
        cell_text_control.value = str(value) if value != 0 else ""
        if is_fixed:
            cell_text_control.color = INITIAL_NUMBER_COLOR
            cell_text_control.weight = ft.FontWeight.BOLD
        elif (r, c) in mismatches:
            cell_text_control.color = ERROR_NUMBER_COLOR
            cell_text_control.weight = ft.FontWeight.BOLD
        else:
            cell_text_control.color = USER_ENTERED_COLOR
            cell_text_control.weight = ft.FontWeight.NORMAL

        cell_container = cell_text_control.parent
        if cell_container:
            if session.selected_cell == (r, c):
                cell_container.bgcolor = SELECTED_CELL_BG_COLOR
            elif is_related_cell(session.selected_cell, r, c):
                cell_container.bgcolor = RELATED_CELL_BG_COLOR
            elif is_fixed:
                cell_container.bgcolor = INITIAL_CELL_BG_COLOR
            else:
                cell_container.bgcolor = NORMAL_CELL_BG_COLOR

    def create_sudoku_grid_ui():
        sudoku_grid_container.controls.clear()
        for r_idx in range(GRID_SIZE):
            row_controls = []
            for c_idx in range(GRID_SIZE):
                cell_text = ft.Text(size=FONT_SIZE_XLARGE, text_align=ft.TextAlign.CENTER)
                text_controls[r_idx][c_idx] = cell_text
                row_controls.append(ft.Container(
                    content=cell_text,
                    width=SUDOKU_CELL_SIZE, height=SUDOKU_CELL_SIZE,
                    alignment=ft.alignment.center, data=(r_idx, c_idx),
                    on_click=lambda e, r=r_idx, c=c_idx: handle_cell_click(r, c),
                    border=cell_border(r_idx, c_idx),
                ))
            sudoku_grid_container.controls.append(ft.Row(row_controls, spacing=0, alignment=ft.MainAxisAlignment.CENTER))

    def create_number_palette():
        number_palette.controls.clear()

        def digit_button(i):
            return ft.ElevatedButton(
                str(i), on_click=lambda e, num=i: handle_digit(num),
                width=NUMBER_PALETTE_BUTTON_SIZE, height=NUMBER_PALETTE_BUTTON_SIZE,
                style=ft.ButtonStyle(padding=0),
            )

        row1_controls = [ft.ElevatedButton(
            "Hint", on_click=lambda e: handle_hint(), height=NUMBER_PALETTE_BUTTON_SIZE,
            bgcolor=HINT_BUTTON_COLOR, color=ft.Colors.WHITE, style=ft.ButtonStyle(padding=5),
        )]
        row1_controls.extend(digit_button(i) for i in range(1, 6))
        row2_controls = [digit_button(i) for i in range(6, 10)]
        row2_controls.append(ft.ElevatedButton(
            content=ft.Icon(ft.Icons.BACKSPACE_OUTLINED, size=NUMBER_PALETTE_BUTTON_SIZE * 0.6),
            on_click=lambda e: handle_digit(0),
            width=NUMBER_PALETTE_BUTTON_SIZE, height=NUMBER_PALETTE_BUTTON_SIZE,
            tooltip="Clear cell", style=ft.ButtonStyle(padding=0),
        ))
        number_palette.controls.extend([
            ft.Row(controls=row1_controls, alignment=ft.MainAxisAlignment.CENTER, spacing=5),
            ft.Row(controls=row2_controls, alignment=ft.MainAxisAlignment.CENTER, spacing=5),
        ])

    def refresh_display():
        if not session.has_puzzle:
            return
        mismatches = session.mismatches()
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                update_cell_display(r, c, mismatches)
        timer_text.value = session.elapsed_display()
        score_text.value = f"Score: {session.current_score}"
        hints_text.value = f"Hints left: {session.hints_left}"
        if session.hints_left <= 0:
            hint_button.text = "No Hints Left"
            hint_button.disabled = True
        else:
            hint_button.text = f"Use Hint (-{HINT_PENALTY} points) - {session.hints_left} left"
            hint_button.disabled = not session.is_playing
        number_palette.visible = session.is_playing and session.selected_cell is not None
        if page.client_storage:
            page.update()

    # --- event handlers ---
    def run_action(action_type, payload=None):
        result = process_sudoku_action(session, action_type, payload, storage=page.client_storage)
        if result.won:
            stop_timer()
            status_text.value = "🎉 Solved!"
            show_dialog("Congratulations!", result.message)
        return result

    def handle_cell_click(r, c):
        if not session.is_playing:
            return
        if session.is_fixed(r, c):
            session.selected_cell = None
        else:
            run_action("SELECT_CELL", {"row": r, "col": c})
        refresh_display()

    def handle_digit(num):
        if not session.is_playing or session.selected_cell is None:
            return
        run_action("PLACE_DIGIT", {"digit": num})
        refresh_display()

    def handle_hint():
        result = run_action("USE_HINT")
        if not result.won:
            show_message(result.message)
        refresh_display()

    def handle_check(e):
        result = run_action("CHECK_SOLUTION", {"silent": False})
        if not result.won and result.message:
            show_dialog("Sudoku", result.message)
        refresh_display()

    def handle_show_solution(e):
        result = run_action("SHOW_SOLUTION")
        if result.processed:
            stop_timer()
            status_text.value = "💡 This is the solution."
            show_dialog("Solution", result.message)
        else:
            show_message(result.message)
        refresh_display()

    def handle_reset(e):
        result = run_action("RESET_GAME")
        if result.processed:
            restart_timer()
            status_text.value = "Puzzle reset. Good luck!"
        else:
            show_message(result.message)
        refresh_display()

    def start_new_game(e=None):
        result = run_action("NEW_GAME", {"difficulty": difficulty_dropdown.value or difficulty})
        create_sudoku_grid_ui()
        restart_timer()
        status_text.value = result.message
        refresh_display()

    def handle_keyboard(e: ft.KeyboardEvent):
        digit = key_to_digit(e.key)
        if digit is not None:
            handle_digit(digit)

    def leave(go_fn):
        stop_timer()
        page.on_keyboard_event = None
        go_fn()

    page.on_keyboard_event = handle_keyboard
    create_number_palette()

    if session.has_puzzle and session.difficulty == difficulty:
        create_sudoku_grid_ui()
        if session.is_playing:
            restart_timer()
            status_text.value = "Welcome back!"
    else:
        start_new_game()

    title_bar = ft.Row(
        [
            ft.IconButton(ft.Icons.HOME_ROUNDED, tooltip="Home", on_click=lambda e: leave(go_home_fn), icon_size=TITLE_ICON_SIZE),
            ft.Text("🧩 Sudoku", size=FONT_SIZE_TITLE, weight=ft.FontWeight.BOLD, expand=True, text_align=ft.TextAlign.CENTER),
            ft.IconButton(ft.Icons.BAR_CHART_ROUNDED, tooltip="Statistics", on_click=lambda e: leave(go_stats_fn), icon_size=TITLE_ICON_SIZE),
        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN, vertical_alignment=ft.CrossAxisAlignment.CENTER
    )
    info_bar = ft.Row(
        [ft.Icon(ft.Icons.TIMER_OUTLINED), timer_text, score_text, hints_text],
        alignment=ft.MainAxisAlignment.CENTER, spacing=15,
    )
    controls_bar = ft.Row(
        [difficulty_dropdown, ft.ElevatedButton("🔄 New Game", on_click=start_new_game, height=BUTTON_HEIGHT_NORMAL)],
        alignment=ft.MainAxisAlignment.CENTER, spacing=10,
    )
    action_area = ft.Row(
        [
            ft.ElevatedButton("✅ Check Solution", on_click=handle_check, height=BUTTON_HEIGHT_NORMAL),
            hint_button,
            ft.ElevatedButton("🏳️ Show Solution", on_click=handle_show_solution, height=BUTTON_HEIGHT_NORMAL, bgcolor=ft.Colors.AMBER_200),
            ft.ElevatedButton("↩️ Reset", on_click=handle_reset, height=BUTTON_HEIGHT_NORMAL),
        ],
        alignment=ft.MainAxisAlignment.CENTER, wrap=True, spacing=10, run_spacing=10,
    )

    main_column = ft.Column(
        [title_bar, controls_bar, info_bar, status_text, sudoku_grid_container, number_palette, action_area],
        expand=True, scroll=ft.ScrollMode.ADAPTIVE,
        horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=10,
    )
    refresh_display()
    return [ft.Container(content=main_column, expand=True, alignment=ft.alignment.top_center, padding=ft.padding.all(10))]


# --- GAME ENTRY POINT ---
def sudoku_game_entry(page: ft.Page, go_home_fn, go_stats_fn, difficulty: str = "medium"):
    session = page.data.get("sudoku_session")
    if session is None:
        session = GameSession()
        page.data["sudoku_session"] = session
    return sudoku_game_logic(page, go_home_fn, go_stats_fn, session, difficulty)
