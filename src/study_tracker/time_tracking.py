#!/usr/bin/env python3
"""
Active-time accumulation for Study Tracker.

Measures how long the application is in the foreground and accumulates
that time into per-day totals, persisted as a weekly usage map. Handles
periodic flushing, pause/resume on visibility changes, and sessions that
span midnight.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Dict, List, Optional

from .activity_monitor import TrackingLogger, VisibilityMonitor
from .models import DailyUsage, WeeklyUsage
from .scheduler import SystemClock
from .storage import UsageStore
from .utils import date_key

TrackerListener = Callable[["TimeTracker"], None]


@dataclass
class TrackerConfig:
    """Timer cadence for TimeTracker, in seconds."""

    flush_interval: float = 10.0
    duration_interval: float = 60.0
    day_check_interval: float = 30.0


class TimeTracker:
    """
    Idle/Tracking state machine over a weekly usage map.

    Sub-minute time is never rounded up: each flush credits whole minutes
    and carries the remaining seconds into the next flush, across
    stop/start cycles and across midnight.

    The day-change check runs for the tracker's whole lifetime, so an idle
    tracker still moves to the new day at midnight. The flush and duration
    timers only run while tracking.
    """

    def __init__(
        self,
        usage_store: UsageStore,
        clock=None,
        logger: Optional[TrackingLogger] = None,
        flush_interval: float = 10.0,
        duration_interval: float = 60.0,
        day_check_interval: float = 30.0,
    ):
        self.usage_store = usage_store
        self.clock = clock or SystemClock()
        self.logger = logger or TrackingLogger(verbose=False)
        self.config = TrackerConfig(
            flush_interval=flush_interval,
            duration_interval=duration_interval,
            day_check_interval=day_check_interval,
        )

        # Timer threads and callers share every piece of state below
        self._lock = threading.RLock()
        self._listeners: List[TrackerListener] = []
        self._session_timers: list = []

        self._weekly: WeeklyUsage = usage_store.load()
        self._current_day = date_key(self.clock.now())
        self._weekly.setdefault(self._current_day, DailyUsage.empty(self._current_day))

        self._tracking = False
        # Flush cursor: moves forward each time minutes are credited
        self._session_start: Optional[datetime] = None
        # When the user's current session began, for display only
        self._session_opened: Optional[datetime] = None
        self._session_duration = 0
        self._carry_seconds = 0.0

        self._day_timer = self.clock.schedule_repeating(
            self.config.day_check_interval, self.reconcile_day_change
        )

    # Read accessors

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def current_session_start(self) -> Optional[datetime]:
        return self._session_start

    @property
    def current_session_duration(self) -> int:
        """Whole minutes since the session opened, refreshed periodically."""
        return self._session_duration

    @property
    def current_day(self) -> str:
        return self._current_day

    @property
    def today_usage(self) -> DailyUsage:
        with self._lock:
            usage = self._weekly.get(self._current_day)
            if usage is None:
                return DailyUsage.empty(self._current_day)
            return usage.copy()

    @property
    def weekly_usage(self) -> Dict[str, DailyUsage]:
        with self._lock:
            return {day: usage.copy() for day, usage in self._weekly.items()}

    # Change notification

    def subscribe(self, listener: TrackerListener) -> Callable[[], None]:
        """Register a state-changed listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        # Called with the lock released so listeners may read state freely
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                print(f"Error in tracker listener: {e}")

    def attach_visibility(self, monitor: VisibilityMonitor) -> Callable[[], None]:
        """Start and stop tracking as the monitor's visibility changes."""
        return monitor.subscribe(self.handle_visibility_change)

    # Transitions

    def start_tracking(self) -> None:
        """Idle -> Tracking."""
        with self._lock:
            if self._tracking:
                return

            now = self.clock.now()
            self._reconcile(now)
            self._begin_session(now)
            self.logger.log_tracking_start(self._current_day)
        self._notify()

    def stop_tracking(self) -> None:
        """Tracking -> Idle, with a final flush."""
        with self._lock:
            if not self._tracking:
                return

            self._flush(self.clock.now(), absorb=True)
            self._tracking = False
            self._session_start = None
            self._session_opened = None
            self._session_duration = 0
            self._cancel_session_timers()
            self.logger.log_tracking_stop(
                self._current_day, self.today_usage.total_minutes
            )
        self._notify()

    def flush(self, now: Optional[datetime] = None) -> int:
        """Move elapsed whole minutes into the day's total.

        Returns the number of minutes credited. Less than a minute of
        elapsed time is a no-op that leaves the session start untouched.
        """
        with self._lock:
            if not self._tracking:
                return 0
            credited = self._flush(now or self.clock.now())
        if credited:
            self._notify()
        return credited

    def reconcile_day_change(self, now: Optional[datetime] = None) -> bool:
        """Split the open session at midnight if the date has advanced.

        Also runs while idle, so the new day's zero record appears at
        midnight. Returns True if a day change was handled.
        """
        with self._lock:
            changed = self._reconcile(now or self.clock.now())
        if changed:
            self._notify()
        return changed

    def refresh_session_duration(self, now: Optional[datetime] = None) -> None:
        """Update the advisory current-session duration."""
        with self._lock:
            if not self._tracking or self._session_opened is None:
                return

            now = now or self.clock.now()
            self._reconcile(now)
            elapsed = max((now - self._session_opened).total_seconds(), 0.0)
            self._session_duration = int(elapsed // 60)
        self._notify()

    def handle_visibility_change(self, visible: bool) -> None:
        """Pause while hidden; resume on the correct day when visible."""
        self.logger.log_visibility(visible)
        if visible:
            self.reconcile_day_change()
            self.start_tracking()
        else:
            self.stop_tracking()

    def reset_all_data(self) -> None:
        """Discard all recorded time. Unflushed time is dropped, not saved."""
        with self._lock:
            was_tracking = self._tracking
            self._cancel_session_timers()
            self._tracking = False
            self._session_start = None
            self._session_opened = None
            self._session_duration = 0
            self._carry_seconds = 0.0

            self.usage_store.clear()

            now = self.clock.now()
            self._current_day = date_key(now)
            self._weekly = {self._current_day: DailyUsage.empty(self._current_day)}
            self.usage_store.save(self._weekly)
            self.logger.log_reset()

            if was_tracking:
                self._begin_session(now)
        self._notify()

    def shutdown(self) -> None:
        """Best-effort final flush before the process exits."""
        self.stop_tracking()
        self._day_timer.cancel()

    # Internals

    def _begin_session(self, now: datetime) -> None:
        self._session_start = now
        self._session_opened = now
        self._session_duration = 0
        self._tracking = True
        self._start_session_timers()

    def _start_session_timers(self) -> None:
        if self._session_timers:
            return

        self._session_timers = [
            self.clock.schedule_repeating(self.config.flush_interval, self.flush),
            self.clock.schedule_repeating(
                self.config.duration_interval, self.refresh_session_duration
            ),
        ]

    def _cancel_session_timers(self) -> None:
        for timer in self._session_timers:
            timer.cancel()
        self._session_timers = []

    def _reconcile(self, now: datetime) -> bool:
        today = date_key(now)
        start = self._session_start if self._tracking else None

        if today == self._current_day and (start is None or date_key(start) == today):
            return False

        self._roll_over(now)
        return True

    def _flush(self, now: datetime, absorb: bool = False) -> int:
        start = self._session_start
        if start is None:
            return 0

        today = date_key(now)
        if date_key(start) != today or self._current_day != today:
            return self._roll_over(now)

        elapsed = max((now - start).total_seconds(), 0.0)
        if int((self._carry_seconds + elapsed) // 60) == 0 and not absorb:
            return 0

        minutes = self._credit_seconds(today, elapsed)
        self._session_start = now
        if minutes:
            self._persist()
            self.logger.log_flush(today, minutes, self._weekly[today].total_minutes)
        return minutes

    def _roll_over(self, now: datetime) -> int:
        previous_day = self._current_day
        today = date_key(now)

        credited = 0
        if self._tracking and self._session_start is not None:
            credited = self._credit_span(self._session_start, now)
            self._session_start = now

        self._weekly.setdefault(today, DailyUsage.empty(today))
        self._current_day = today
        self._persist()
        self.logger.log_day_change(previous_day, today)
        return credited

    def _credit_span(self, start: datetime, end: datetime) -> int:
        """Credit [start, end) to the days it covers, one midnight at a time."""
        credited = 0
        cursor = start
        while cursor.date() < end.date():
            midnight = datetime.combine(
                cursor.date() + timedelta(days=1), time.min, tzinfo=cursor.tzinfo
            )
            credited += self._credit_seconds(
                date_key(cursor), (midnight - cursor).total_seconds()
            )
            cursor = midnight

        credited += self._credit_seconds(
            date_key(end), max((end - cursor).total_seconds(), 0.0)
        )
        return credited

    def _credit_seconds(self, day: str, seconds: float) -> int:
        total = self._carry_seconds + seconds
        minutes = int(total // 60)
        self._carry_seconds = total - minutes * 60

        usage = self._weekly.setdefault(day, DailyUsage.empty(day))
        usage.total_minutes += minutes
        return minutes

    def _persist(self) -> None:
        # Keep days only another writer knows about; ours win per day
        stored = self.usage_store.load()
        stored.update(self._weekly)
        self.usage_store.save(stored)
