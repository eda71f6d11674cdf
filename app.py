# app.py
import os

import flet as ft

from game_timer import stop_game_timer
from sudoku_game import DIFFICULTY_LABELS, build_example_grid, sudoku_game_entry
from sudoku_session import HINT_PENALTY, HINTS_PER_GAME, REVEAL_PENALTY
from sudoku_stats import clear_stats, load_dark_theme, load_stats, save_dark_theme
from sudoku_utils import DEFAULT_DIFFICULTY, DIFFICULTY_SETTINGS

PORT = int(os.environ.get("PORT", 8550))


def main(page: ft.Page):
    page.title = "🧩 Sudoku"
    page.vertical_alignment = ft.MainAxisAlignment.START
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.scroll = ft.ScrollMode.ADAPTIVE
    page.data = {"difficulty": DEFAULT_DIFFICULTY, "sudoku_session": None}

    def apply_theme():
        dark = bool(page.client_storage) and load_dark_theme(page.client_storage)
        page.theme_mode = ft.ThemeMode.DARK if dark else ft.ThemeMode.LIGHT

    def toggle_theme(e):
        dark = page.theme_mode != ft.ThemeMode.DARK
        save_dark_theme(page.client_storage, dark)
        apply_theme()
        page.update()

    def go_home():
        page.go("/")

    def go_stats():
        page.go("/stats")

    def on_difficulty_change(e):
        page.data["difficulty"] = e.control.value

    def view_home_page():
        difficulty_dropdown = ft.Dropdown(
            label="Difficulty", value=page.data["difficulty"], width=200,
            options=[ft.dropdown.Option(key, DIFFICULTY_LABELS.get(key, key)) for key in DIFFICULTY_SETTINGS],
            on_change=on_difficulty_change,
        )
        return ft.View(
            "/",
            [
                ft.Text("🧩 Sudoku", size=32, weight="bold", text_align="center"),
                ft.Text("Fill the grid so every row, column and 3x3 box holds 1-9.", size=16, text_align="center"),
                difficulty_dropdown,
                ft.Column(
                    [
                        ft.ElevatedButton("▶️ Play", on_click=lambda _: page.go(f"/game/{page.data['difficulty']}"), width=250, height=50),
                        ft.ElevatedButton("📜 How to Play", on_click=lambda _: page.go("/rules"), width=250, height=50),
                        ft.ElevatedButton("📊 Statistics", on_click=lambda _: go_stats(), width=250, height=50),
                        ft.TextButton("🌓 Toggle dark mode", on_click=toggle_theme),
                    ],
                    alignment=ft.MainAxisAlignment.CENTER,
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    spacing=10,
                ),
            ],
            vertical_alignment=ft.MainAxisAlignment.CENTER,
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=20,
            scroll=ft.ScrollMode.AUTO,
        )

    def view_rules_page():
        rules_content = [
            ft.Text("📜 How to Play", size=28, weight="bold"),
            ft.Text("🎯 Fill every empty cell with a digit from 1 to 9.", size=16, text_align=ft.TextAlign.CENTER),
            ft.Text("🧩 Each row, column and 3x3 box must contain every digit exactly once.", size=16, text_align=ft.TextAlign.CENTER),
            build_example_grid(),
            ft.Text("🕹 Click a cell, then type a digit or use the keypad. Delete, Backspace or 0 clears it.", size=16, text_align=ft.TextAlign.CENTER),
            ft.Text(f"💡 You get {HINTS_PER_GAME} hints per game, each costs {HINT_PENALTY} points. Showing the solution costs {REVEAL_PENALTY}.", size=16, text_align=ft.TextAlign.CENTER),
            ft.Text("🏁 Easy starts at 800 points (x1.0), Medium at 1000 (x1.5), Hard at 1200 (x2.0). "
                    "Finish within 5 minutes for a time bonus.", size=16, text_align=ft.TextAlign.CENTER),
        ]
        return ft.View(
            "/rules",
            rules_content + [
                ft.ElevatedButton("▶️ Play", on_click=lambda _: page.go(f"/game/{page.data['difficulty']}"), width=200),
                ft.ElevatedButton("🏠 Home", on_click=lambda _: go_home(), width=200),
            ],
            vertical_alignment=ft.MainAxisAlignment.CENTER,
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=15,
            scroll=ft.ScrollMode.AUTO,
        )

    def view_stats_page():
        stats = load_stats(page.client_storage)
        history_controls = []
        if not stats["history"]:
            history_controls.append(ft.Text("No games played yet", italic=True))
        for entry in stats["history"]:
            history_controls.append(ft.ListTile(
                leading=ft.Icon(ft.Icons.EMOJI_EVENTS_OUTLINED),
                title=ft.Text(f"{entry['time']} ({entry['difficulty']})", weight=ft.FontWeight.BOLD),
                subtitle=ft.Text(entry["date"]),
                trailing=ft.Text(f"Score: {entry.get('score') or 0}"),
            ))

        def clear_click(e):
            clear_stats(page.client_storage)
            page.open(ft.SnackBar(ft.Text("Statistics cleared successfully!")))
            page.views[-1] = view_stats_page()
            page.update()

        return ft.View(
            "/stats",
            [
                ft.Text("📊 Statistics", size=28, weight="bold"),
                ft.Text(f"Games won: {stats['wins']}", size=20),
                ft.Column(history_controls, width=420, spacing=0),
                ft.Row(
                    [
                        ft.ElevatedButton("🗑️ Clear statistics", on_click=clear_click),
                        ft.ElevatedButton("🏠 Home", on_click=lambda _: go_home()),
                    ],
                    alignment=ft.MainAxisAlignment.CENTER,
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=15,
            scroll=ft.ScrollMode.AUTO,
        )

    def view_game_page(difficulty: str):
        if difficulty not in DIFFICULTY_SETTINGS:
            print(f"Unknown difficulty '{difficulty}' in route, using {DEFAULT_DIFFICULTY}.")
            difficulty = DEFAULT_DIFFICULTY
        page.data["difficulty"] = difficulty
        return ft.View(
            f"/game/{difficulty}",
            sudoku_game_entry(page, go_home, go_stats, difficulty),
            scroll=ft.ScrollMode.ADAPTIVE,
            vertical_alignment=ft.MainAxisAlignment.START,
            padding=10,
        )

    def route_change(e: ft.RouteChangeEvent):
        target_route = e.route
        print(f"--- ROUTE CHANGE --- Target: {target_route}")
        page.views.clear()

        # The game timer only runs while the game view is shown
        if not target_route.startswith("/game"):
            timer_state = page.data.get("sudoku_timer")
            if timer_state:
                stop_game_timer(timer_state["event"], "sudoku")
                timer_state["event"] = None
            page.on_keyboard_event = None

        route_parts = target_route.strip("/").split("/")
        current_route_base = route_parts[0] if route_parts and route_parts[0] else ""

        if current_route_base == "":
            new_view_to_append = view_home_page()
        elif current_route_base == "rules":
            new_view_to_append = view_rules_page()
        elif current_route_base == "stats":
            new_view_to_append = view_stats_page()
        elif current_route_base == "game":
            difficulty = route_parts[1] if len(route_parts) > 1 else page.data["difficulty"]
            new_view_to_append = view_game_page(difficulty)
        else:
            print(f"Routing to Home Page (fallback for unknown route: {target_route})")
            new_view_to_append = view_home_page()

        page.views.append(new_view_to_append)
        if page.client_storage:
            page.update()

    def view_pop(e: ft.ViewPopEvent):
        if len(page.views) > 1:
            page.views.pop()
            page.go(page.views[-1].route)
        else:
            go_home()

    page.on_route_change = route_change
    page.on_view_pop = view_pop
    apply_theme()
    page.go(page.route if page.route else "/")


if __name__ == "__main__":
    ft.app(
        target=main,
        assets_dir="assets",
        port=PORT,
        view=ft.WEB_BROWSER,
    )
