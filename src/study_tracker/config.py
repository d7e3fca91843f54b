"""Settings for Study Tracker.

Values come from three layers: built-in defaults, the settings.json file
in the config directory, and STUDY_TRACKER_* environment variables. Later
layers win.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from .utils import get_config_directory, get_data_directory

DEFAULT_CONFIG = {
    "data_dir": "",  # empty means the platform data directory
    "flush_interval": 10,  # seconds
    "duration_interval": 60,  # seconds
    "day_check_interval": 30,  # seconds
    "verbose_logging": True,
    "sync_endpoint": "",
    "sync_auth_token": "",  # nosec B105
}

INTERVAL_KEYS = ("flush_interval", "duration_interval", "day_check_interval")


def _parse_interval(raw: str) -> int:
    seconds = int(raw)
    if seconds <= 0:
        raise ValueError(f"interval must be positive: {seconds}")
    return seconds


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("true", "1", "yes", "on")


ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "STUDY_TRACKER_DATA_DIR": ("data_dir", str),
    "STUDY_TRACKER_ENDPOINT": ("sync_endpoint", str),
    "STUDY_TRACKER_AUTH_TOKEN": ("sync_auth_token", str),  # nosec B105
    "STUDY_TRACKER_FLUSH_INTERVAL": ("flush_interval", _parse_interval),
    "STUDY_TRACKER_DURATION_INTERVAL": ("duration_interval", _parse_interval),
    "STUDY_TRACKER_DAY_CHECK_INTERVAL": ("day_check_interval", _parse_interval),
    "STUDY_TRACKER_VERBOSE": ("verbose_logging", _parse_bool),
}


def _setting(key: str, doc: str, writable: bool = False) -> property:
    def getter(self):
        return self.get(key, DEFAULT_CONFIG[key])

    def setter(self, value):
        self.set(key, value)

    return property(getter, setter if writable else None, doc=doc)


class Config:
    """Settings backed by settings.json in the config directory."""

    flush_interval = _setting("flush_interval", "Seconds between session flushes.")
    duration_interval = _setting("duration_interval", "Seconds between duration refreshes.")
    day_check_interval = _setting("day_check_interval", "Seconds between day-change checks.")
    verbose_logging = _setting("verbose_logging", "Print tracking events.", writable=True)
    sync_endpoint = _setting("sync_endpoint", "URL completed days are posted to.", writable=True)
    sync_auth_token = _setting("sync_auth_token", "Bearer token for the sync endpoint.")

    def __init__(self, config_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else get_config_directory()
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file = self.config_dir / "settings.json"

        self._config = DEFAULT_CONFIG.copy()
        self._config.update(self._read_settings_file())

    def _read_settings_file(self) -> Dict[str, Any]:
        """Settings stored on disk. Unreadable files count as empty."""
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("settings must be a JSON object")
        except (ValueError, OSError) as e:
            print(f"Warning: Could not load config file: {e}")
            print("Using default configuration.")
            return {}

        for key in INTERVAL_KEYS:
            value = stored.get(key)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                print(f"Warning: Ignoring invalid {key} in {self.config_file}: {value!r}")
                del stored[key]
        return stored

    def save(self) -> None:
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            print(f"Warning: Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value

    def update(self, values: Dict[str, Any]) -> None:
        self._config.update(values)

    def reset_to_defaults(self) -> None:
        self._config = DEFAULT_CONFIG.copy()

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()

    @property
    def data_dir(self) -> Path:
        """Configured data directory, or the platform default."""
        configured = self.get("data_dir")
        return Path(configured) if configured else get_data_directory()


def load_config_from_env() -> Dict[str, Any]:
    """Collect overrides from STUDY_TRACKER_* variables.

    Values that fail to parse are reported and left out.
    """
    overrides: Dict[str, Any] = {}
    for env_var, (key, parse) in ENV_OVERRIDES.items():
        raw = os.getenv(env_var)
        if raw is None:
            continue
        try:
            overrides[key] = parse(raw)
        except ValueError:
            print(f"Warning: Invalid value for {env_var}: {raw}")
    return overrides


# Shared by the command-line entry points only
_global_config: Optional[Config] = None


def get_config() -> Config:
    global _global_config
    if _global_config is None:
        config = Config()
        config.update(load_config_from_env())
        _global_config = config
    return _global_config


def reload_config() -> Config:
    """Drop the cached settings and read them again."""
    global _global_config
    _global_config = None
    return get_config()
