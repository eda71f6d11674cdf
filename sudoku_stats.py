# sudoku_stats.py
import json
from datetime import datetime

STATS_KEY = "sudokuStats"
THEME_KEY = "sudoku-dark"
HISTORY_LIMIT = 10


def empty_stats():
    return {"wins": 0, "history": []}


def _is_valid_entry(entry):
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("time"), str)
        and isinstance(entry.get("score"), int) and not isinstance(entry.get("score"), bool)
        and isinstance(entry.get("difficulty"), str)
        and isinstance(entry.get("date"), str)
    )


def _is_valid_stats(data):
    return (
        isinstance(data, dict)
        and isinstance(data.get("wins"), int)
        and isinstance(data.get("history"), list)
    )


def load_stats(storage):
    """Reads the win log from ``storage`` (Flet ``page.client_storage`` or any get/set/remove object).

    Missing or unreadable data is replaced with an empty log; malformed
    history entries are dropped.
    """
    raw = storage.get(STATS_KEY)
    if raw is None:
        stats = empty_stats()
        storage.set(STATS_KEY, json.dumps(stats))
        return stats
    try:
        stats = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError as ex:
        print(f"[Stats] Stored statistics unreadable ({ex}), starting over.")
        stats = None
    if not _is_valid_stats(stats):
        stats = empty_stats()
        storage.set(STATS_KEY, json.dumps(stats))
        return stats
    # Malformed history entries are dropped, the win count is kept
    history = [entry for entry in stats["history"] if _is_valid_entry(entry)][:HISTORY_LIMIT]
    if len(history) != len(stats["history"]):
        print(f"[Stats] Dropped {len(stats['history']) - len(history)} malformed history entries.")
        stats = {"wins": stats["wins"], "history": history}
        storage.set(STATS_KEY, json.dumps(stats))
    return stats


def save_win_data(storage, time_text: str, score, difficulty: str, now=None):
    stats = load_stats(storage)
    date = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    stats["wins"] += 1
    stats["history"].insert(0, {
        "time": time_text,
        "score": int(round(score)),
        "difficulty": difficulty,
        "date": date,
    })
    stats["history"] = stats["history"][:HISTORY_LIMIT]
    storage.set(STATS_KEY, json.dumps(stats))
    print(f"[Stats] Win #{stats['wins']} saved: {time_text}, {difficulty}, {score} points.")
    return stats


def clear_stats(storage):
    storage.remove(STATS_KEY)
    return load_stats(storage)


def load_dark_theme(storage) -> bool:
    value = storage.get(THEME_KEY)
    return value is True or value == "true"


def save_dark_theme(storage, enabled: bool):
    storage.set(THEME_KEY, "true" if enabled else "false")
