# game_timer.py
import threading
import time


def format_elapsed(total_seconds) -> str:
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def start_game_timer(tick_action, interval=1.0, label="game"):
    """Runs ``tick_action()`` every ``interval`` seconds on a daemon thread.

    Returns the ``threading.Event`` that stops it; pass it to ``stop_game_timer``.
    """
    stop_event = threading.Event()

    def timer_logic():
        while not stop_event.wait(interval):
            try:
                tick_action()
            except Exception as ex:  # Page gone, stop ticking
                print(f"[Timer] {label}: tick failed ({ex}), stopping.")
                stop_event.set()
                return

    thread = threading.Thread(target=timer_logic, daemon=True)
    thread.start()
    print(f"[Timer] {label}: started ({interval}s ticks).")
    return stop_event


def stop_game_timer(stop_event, label="game"):
    if stop_event is not None and not stop_event.is_set():
        stop_event.set()
        print(f"[Timer] {label}: stopped.")
        return True
    return False


class Stopwatch:
    """Wall-clock elapsed time that can be frozen when a game ends."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started_at = None
        self._stopped_at = None

    def start(self):
        self._started_at = self._clock()
        self._stopped_at = None

    def stop(self):
        if self._started_at is not None and self._stopped_at is None:
            self._stopped_at = self._clock()

    @property
    def running(self):
        return self._started_at is not None and self._stopped_at is None

    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return int(end - self._started_at)
