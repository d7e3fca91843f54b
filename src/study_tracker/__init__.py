"""
Study Tracker - active study time and login streak tracking.

This package provides:

- Per-day accumulation of active time, split correctly across midnight
- Pause/resume when the application is hidden or shown
- A daily login streak with points and levels
- JSON-based local storage
- Optional upload of completed days to an HTTP endpoint
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core import StudyTracker
from .progression import ProgressionEngine
from .time_tracking import TimeTracker

__all__ = [
    "StudyTracker",
    "ProgressionEngine",
    "TimeTracker",
]
