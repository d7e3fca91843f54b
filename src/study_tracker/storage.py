#!/usr/bin/env python3
"""
Data storage and persistence for Study Tracker.
Handles all file I/O operations and record (de)serialisation.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from .models import DailyUsage, StreakData, WeeklyUsage

WEEKLY_USAGE_KEY = "weekly_usage"
STREAK_DATA_KEY = "streak_data"


class KeyValueStore:
    """Durable string key-value storage, one JSON file per key."""

    def __init__(self, data_dir: str = "study_data"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or unreadable."""
        filepath = self._path(key)
        if not filepath.exists():
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return f.read()
        except (IOError, UnicodeDecodeError) as e:
            print(f"Warning: Could not read {filepath}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        """Store a value. Best-effort: failures are reported, not raised."""
        filepath = self._path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.data_dir), prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_path, filepath)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
            return True
        except OSError as e:
            print(f"Warning: Could not save {filepath}: {e}")
            return False

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        filepath = self._path(key)
        try:
            filepath.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Warning: Could not remove {filepath}: {e}")


class UsageStore:
    """Loads and saves the weekly usage map."""

    def __init__(self, kv_store: KeyValueStore, key: str = WEEKLY_USAGE_KEY):
        self.kv_store = kv_store
        self.key = key

    def load(self) -> WeeklyUsage:
        """Load the weekly map. Absent or corrupt data loads as empty."""
        raw = self.kv_store.get(self.key)
        if raw is None:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"Warning: Ignoring corrupt usage data: {e}")
            return {}

        if not isinstance(data, dict):
            return {}

        weekly: WeeklyUsage = {}
        for date_key, entry in data.items():
            try:
                usage = DailyUsage.from_dict(entry)
            except (KeyError, TypeError, ValueError):
                continue
            weekly[date_key] = usage
        return weekly

    def save(self, weekly: WeeklyUsage) -> bool:
        data = {date_key: usage.to_dict() for date_key, usage in weekly.items()}
        return self.kv_store.set(self.key, json.dumps(data, indent=2))

    def clear(self) -> None:
        self.kv_store.remove(self.key)


class StreakStore:
    """Loads and saves the streak record."""

    def __init__(self, kv_store: KeyValueStore, key: str = STREAK_DATA_KEY):
        self.kv_store = kv_store
        self.key = key

    def load(self) -> Optional[StreakData]:
        """Load the streak record, or None if absent or malformed."""
        raw = self.kv_store.get(self.key)
        if raw is None:
            return None

        try:
            return StreakData.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            print(f"Warning: Ignoring corrupt streak data: {e}")
            return None

    def save(self, streak_data: StreakData) -> bool:
        return self.kv_store.set(self.key, json.dumps(streak_data.to_dict(), indent=2))

    def clear(self) -> None:
        self.kv_store.remove(self.key)
