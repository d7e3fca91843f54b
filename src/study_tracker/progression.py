"""
Login streak, points and level progression.

Each distinct calendar day on which the app is opened extends the streak
and awards points that scale with the streak length; points drive levels.
"""

import math
from datetime import datetime
from typing import Optional

from .activity_monitor import TrackingLogger
from .models import StreakData
from .scheduler import SystemClock
from .storage import StreakStore
from .utils import date_key, parse_date_key

POINTS_PER_LEVEL = 100
POINTS_PER_STREAK_DAY = 10


def points_for_level(level: int) -> int:
    """Cumulative points required to complete `level`."""
    return POINTS_PER_LEVEL * level


def level_progress_percent(streak_data: StreakData) -> int:
    """Percentage of the current level earned, clamped to [0, 100]."""
    level_start = points_for_level(streak_data.level - 1)
    level_end = points_for_level(streak_data.level)
    earned = streak_data.total_points - level_start
    percent = math.floor(earned / (level_end - level_start) * 100)
    return max(0, min(percent, 100))


def streak_benefit_message(current_streak: int) -> str:
    if current_streak <= 1:
        return "Sign in tomorrow to start your streak!"
    if current_streak < 5:
        return f"Earning {current_streak * POINTS_PER_STREAK_DAY} points per day!"
    if current_streak < 10:
        return "Achievement unlocked: Consistency King!"
    return "Maximum streak bonus achieved! Amazing dedication!"


def format_streak_date(date_string: str) -> str:
    """Format a YYYY-MM-DD date as 'Jan 1, 2024', or 'Never' if empty."""
    if not date_string:
        return "Never"

    day = parse_date_key(date_string)
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def update_streak_on_login(streak_data: StreakData, today: str) -> StreakData:
    """Apply one login on `today` and return the updated copy.

    Logging in again on the same day changes nothing.
    """
    updated = streak_data.copy()

    if streak_data.last_login_date != today:
        updated.current_streak += 1
        updated.total_points += POINTS_PER_STREAK_DAY * updated.current_streak
        updated.longest_streak = max(updated.longest_streak, updated.current_streak)

    updated.last_login_date = today

    # Large awards may cross several thresholds at once
    while updated.total_points >= points_for_level(updated.level):
        updated.level += 1
    updated.points_to_next_level = points_for_level(updated.level)

    return updated


class ProgressionEngine:
    """Reads, updates and persists the streak record."""

    def __init__(
        self,
        streak_store: StreakStore,
        clock=None,
        logger: Optional[TrackingLogger] = None,
    ):
        self.streak_store = streak_store
        self.clock = clock or SystemClock()
        self.logger = logger or TrackingLogger(verbose=False)

    def load(self) -> StreakData:
        """Current record without applying a login."""
        return self.streak_store.load() or StreakData()

    def get_and_update(self, now: Optional[datetime] = None) -> StreakData:
        """Apply today's login to the stored record and persist it."""
        today = date_key(now or self.clock.now())
        updated = update_streak_on_login(self.load(), today)
        self.streak_store.save(updated)

        self.logger.log_streak_update(
            updated.current_streak, updated.total_points, updated.level
        )
        return updated

    def reset(self) -> StreakData:
        """Discard the stored record."""
        self.streak_store.clear()
        return StreakData()
