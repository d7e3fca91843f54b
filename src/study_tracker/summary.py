#!/usr/bin/env python3
"""
Weekly usage summaries for Study Tracker.
Aggregates the per-day usage map into a Monday-to-Sunday report.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from .models import WeeklyUsage
from .utils import date_key


@dataclass
class DaySummary:
    label: str  # Mon, Tue, ...
    date: str
    minutes: int
    is_today: bool = False

    @property
    def hours(self) -> float:
        return self.minutes / 60


@dataclass
class WeeklySummary:
    days: List[DaySummary] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(day.minutes for day in self.days)

    @property
    def average_minutes(self) -> int:
        """Average per day over the whole week."""
        return round(self.total_minutes / 7)

    @property
    def most_productive_day(self) -> Optional[DaySummary]:
        if not self.days:
            return None
        return max(self.days, key=lambda day: day.minutes)


def week_days(reference: date) -> List[date]:
    """Monday to Sunday of the week containing `reference`."""
    monday = reference - timedelta(days=reference.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def build_weekly_summary(weekly: WeeklyUsage, reference: date) -> WeeklySummary:
    """Summarise the week containing `reference`; missing days count as zero."""
    today_key = date_key(reference)
    days = []
    for day in week_days(reference):
        key = date_key(day)
        usage = weekly.get(key)
        days.append(
            DaySummary(
                label=day.strftime("%a"),
                date=key,
                minutes=usage.total_minutes if usage else 0,
                is_today=key == today_key,
            )
        )
    return WeeklySummary(days=days)
