"""Pytest configuration and fixtures."""

import shutil
import tempfile
from datetime import datetime, timedelta

import pytest


class ManualTimer:
    """Repeating timer driven by ManualClock.advance()."""

    def __init__(self, clock, interval, callback):
        self.interval = timedelta(seconds=interval)
        self.callback = callback
        self.next_due = clock.now() + self.interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualClock:
    """Deterministic stand-in for SystemClock."""

    def __init__(self, start: datetime):
        self.current = start
        self.timers = []

    def now(self) -> datetime:
        return self.current

    def set(self, moment: datetime) -> None:
        """Jump to a moment without firing timers."""
        self.current = moment

    def schedule_repeating(self, interval, callback):
        timer = ManualTimer(self, interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active_timers(self):
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order."""
        target = self.current + timedelta(seconds=seconds)
        while True:
            due = [t for t in self.active_timers if t.next_due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_due)
            self.current = timer.next_due
            timer.next_due += timer.interval
            timer.callback()
        self.current = target


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def clock():
    """Manual clock starting Monday 2024-01-15 10:00:00."""
    return ManualClock(datetime(2024, 1, 15, 10, 0, 0))


@pytest.fixture
def sample_usage_data():
    """Stored weekly usage as written to disk."""
    return {
        "2024-01-15": {"date": "2024-01-15", "hours": 1, "minutes": 30, "totalMinutes": 90},
        "2024-01-16": {"date": "2024-01-16", "hours": 0, "minutes": 45, "totalMinutes": 45},
        "2024-01-10": {"date": "2024-01-10", "hours": 2, "minutes": 0, "totalMinutes": 120},
    }


@pytest.fixture
def sample_streak_data():
    """Stored streak record as written to disk."""
    return {
        "currentStreak": 3,
        "longestStreak": 5,
        "lastLoginDate": "2024-01-14",
        "totalPoints": 60,
        "level": 1,
        "pointsToNextLevel": 100,
    }


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "unit: mark test as unit test")
