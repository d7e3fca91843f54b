"""Wall clock and repeating timers for Study Tracker."""

import threading
from datetime import datetime
from typing import Callable, Optional


class RepeatingTimer(threading.Thread):
    """Calls a function every `interval` seconds until cancelled."""

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: Optional[str] = None,
    ):
        super().__init__(name=name, daemon=True)
        self.interval = interval
        self.callback = callback
        self._finished = threading.Event()

    def run(self) -> None:
        while not self._finished.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                print(f"Error in timer callback: {e}")

    def cancel(self) -> None:
        """Stop the timer. Safe to call from the callback itself."""
        self._finished.set()

    @property
    def cancelled(self) -> bool:
        return self._finished.is_set()


class SystemClock:
    """Local wall clock backed by datetime and threads."""

    def now(self) -> datetime:
        return datetime.now()

    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> RepeatingTimer:
        """Start a repeating timer and return it."""
        timer = RepeatingTimer(interval, callback)
        timer.start()
        return timer
