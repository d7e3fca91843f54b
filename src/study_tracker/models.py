"""Data models for Study Tracker."""

from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_POINTS_TO_NEXT_LEVEL = 100


@dataclass
class DailyUsage:
    """Accumulated active time for one calendar day."""

    date: str  # YYYY-MM-DD
    total_minutes: int = 0

    @property
    def hours(self) -> int:
        return self.total_minutes // 60

    @property
    def minutes(self) -> int:
        return self.total_minutes % 60

    @classmethod
    def empty(cls, date: str) -> "DailyUsage":
        """Create the zero record for a date."""
        return cls(date=date, total_minutes=0)

    def copy(self) -> "DailyUsage":
        return DailyUsage(date=self.date, total_minutes=self.total_minutes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "hours": self.hours,
            "minutes": self.minutes,
            "totalMinutes": self.total_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyUsage":
        """Parse a stored record. Derived fields are recomputed.

        Raises:
            KeyError, TypeError, ValueError: if the record is malformed.
        """
        date = data["date"]
        total = data["totalMinutes"]
        if not isinstance(date, str) or not date:
            raise ValueError(f"Invalid date: {date!r}")
        if isinstance(total, bool) or not isinstance(total, int):
            raise TypeError(f"Invalid totalMinutes: {total!r}")
        if total < 0:
            raise ValueError(f"Negative totalMinutes: {total}")
        return cls(date=date, total_minutes=total)


# Map of date strings to daily usage
WeeklyUsage = Dict[str, DailyUsage]


# Serialised key for each StreakData field
_STREAK_KEYS = {
    "current_streak": "currentStreak",
    "longest_streak": "longestStreak",
    "last_login_date": "lastLoginDate",
    "total_points": "totalPoints",
    "level": "level",
    "points_to_next_level": "pointsToNextLevel",
}


@dataclass
class StreakData:
    """Persisted login streak and progression record."""

    current_streak: int = 0
    longest_streak: int = 0
    last_login_date: str = ""  # YYYY-MM-DD, empty before the first login
    total_points: int = 0
    level: int = 1
    points_to_next_level: int = DEFAULT_POINTS_TO_NEXT_LEVEL

    def copy(self) -> "StreakData":
        return StreakData(**vars(self))

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in _STREAK_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreakData":
        """Parse a stored record.

        Raises:
            KeyError, TypeError, ValueError: if the record is malformed.
        """
        values: Dict[str, Any] = {}
        for attr, key in _STREAK_KEYS.items():
            value = data[key]
            if attr == "last_login_date":
                if not isinstance(value, str):
                    raise TypeError(f"Invalid {key}: {value!r}")
            elif isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Invalid {key}: {value!r}")
            values[attr] = value

        for attr in ("current_streak", "longest_streak", "total_points"):
            if values[attr] < 0:
                raise ValueError(f"Negative {_STREAK_KEYS[attr]}: {values[attr]}")
        if values["longest_streak"] < values["current_streak"]:
            raise ValueError("longestStreak is shorter than currentStreak")
        if values["level"] < 1:
            raise ValueError(f"Invalid level: {values['level']}")
        return cls(**values)
