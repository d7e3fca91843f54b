#!/usr/bin/env python3
"""
Visibility signal and event logging for Study Tracker.
The visibility signal decides when active time accrues; the logger
reports what the tracker does.
"""

from datetime import datetime
from typing import Callable, List

VisibilityListener = Callable[[bool], None]


class VisibilityMonitor:
    """Observable "is the application in the foreground" flag."""

    def __init__(self, visible: bool = True):
        self._visible = visible
        self._listeners: List[VisibilityListener] = []

    @property
    def visible(self) -> bool:
        return self._visible

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_visible(self, visible: bool) -> None:
        """Update the flag, notifying listeners only on change."""
        if visible == self._visible:
            return

        self._visible = visible
        for listener in list(self._listeners):
            listener(visible)


class TrackingLogger:
    """Handles logging and output for time tracking."""

    def __init__(self, verbose: bool = True):
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if not self.verbose:
            return

        now_str = datetime.now().strftime("%H:%M:%S")
        print(f"[{now_str}] {message}")

    def log_tracking_start(self, day: str) -> None:
        self._log(f"Tracking started for {day}")

    def log_tracking_stop(self, day: str, total_minutes: int) -> None:
        self._log(f"Tracking stopped - {total_minutes} min recorded for {day}")

    def log_flush(self, day: str, minutes: int, total_minutes: int) -> None:
        self._log(f"Saved {minutes} min to {day} (total {total_minutes} min)")

    def log_day_change(self, previous_day: str, new_day: str) -> None:
        self._log(f"Day changed from {previous_day} to {new_day}")

    def log_visibility(self, visible: bool) -> None:
        state = "visible - resuming" if visible else "hidden - pausing"
        self._log(f"[{'ACTIVE' if visible else 'HIDDEN'}] Application {state}")

    def log_reset(self) -> None:
        self._log("All time tracking data has been reset")

    def log_streak_update(self, current_streak: int, total_points: int, level: int) -> None:
        self._log(
            f"Streak: {current_streak} day(s), {total_points} points, level {level}"
        )
