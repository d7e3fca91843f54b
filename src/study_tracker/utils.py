"""Shared helpers for Study Tracker."""

import os
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

DATE_FORMAT = "%Y-%m-%d"


def _app_base_directory() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "StudyTracker"

    xdg_data_home = os.getenv("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home) / "study-tracker"
    return Path.home() / ".local" / "share" / "study-tracker"


def get_data_directory() -> Path:
    """Get the user data directory, creating it if needed."""
    data_dir = _app_base_directory() / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_config_directory() -> Path:
    """Get the user configuration directory (not created)."""
    return _app_base_directory() / "config"


def date_key(moment: Union[date, datetime]) -> str:
    """Format a date or datetime as a YYYY-MM-DD key."""
    return moment.strftime(DATE_FORMAT)


def parse_date_key(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def format_duration(minutes: int) -> str:
    """Format minutes as '2h 5m', or '45m' under an hour."""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def default_pidfile() -> Path:
    """Where the background daemon records its PID."""
    return Path(tempfile.gettempdir()) / "study_tracker.pid"


def read_pid(pidfile: Union[str, Path]) -> Optional[int]:
    try:
        with open(pidfile, "r") as f:
            return int(f.read().strip())
    except (IOError, ValueError):
        return None


def running_daemon_pid(pidfile: Union[str, Path]) -> Optional[int]:
    """PID recorded in the pidfile, if that process is still alive."""
    pid = read_pid(pidfile)
    if pid is None:
        return None

    try:
        os.kill(pid, 0)
    except OSError:
        return None
    return pid
