#!/usr/bin/env python3
"""
Sync of completed study days.

Days before today are final and can be uploaded once; today is still
accumulating and is never sent.
"""

import json
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Set

from .http_sync import UsageUploader
from .models import DailyUsage
from .scheduler import SystemClock
from .storage import KeyValueStore, UsageStore
from .utils import date_key

SYNCED_DAYS_KEY = "synced_days"


@dataclass
class SyncReport:
    synced: int = 0
    failed: int = 0
    skipped: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class SyncLedger:
    """Day keys that have been uploaded."""

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store
        self._days = self._load()

    def _load(self) -> Set[str]:
        raw = self.kv_store.get(SYNCED_DAYS_KEY)
        if raw is None:
            return set()

        try:
            days = json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"Warning: Ignoring corrupt sync ledger: {e}")
            return set()

        if not isinstance(days, list):
            return set()
        return {day for day in days if isinstance(day, str)}

    def __contains__(self, day_key: str) -> bool:
        return day_key in self._days

    def record(self, day_key: str) -> None:
        self._days.add(day_key)
        self.kv_store.set(SYNCED_DAYS_KEY, json.dumps(sorted(self._days)))

    def pending(self, day_keys: Iterable[str]) -> List[str]:
        return sorted(day for day in day_keys if day not in self._days)

    @property
    def last_synced(self) -> Optional[str]:
        return max(self._days) if self._days else None


class UsageSync:
    """Uploads completed days from the usage store."""

    def __init__(
        self,
        data_dir: str,
        endpoint: str = "",
        auth_token: str = "",  # nosec B107
        clock=None,
        uploader: Optional[UsageUploader] = None,
    ):
        self.endpoint = endpoint
        self.clock = clock or SystemClock()

        kv_store = KeyValueStore(data_dir)
        self.usage_store = UsageStore(kv_store)
        self.ledger = SyncLedger(kv_store)
        self.uploader = uploader or UsageUploader(endpoint, auth_token)

    def completed_days(self) -> Dict[str, DailyUsage]:
        today = date_key(self.clock.now())
        return {
            day: usage for day, usage in self.usage_store.load().items() if day < today
        }

    def sync_day(self, usage: DailyUsage) -> bool:
        if not self.uploader.upload(usage, self.clock.now()):
            return False
        self.ledger.record(usage.date)
        return True

    def sync_all(self, force: bool = False, max_days: Optional[int] = None) -> SyncReport:
        """Upload completed days, oldest first.

        Already-synced days are skipped unless `force` is set. `max_days`
        limits the run to the most recent days.
        """
        report = SyncReport()
        if not self.endpoint:
            print("Error: No sync endpoint configured.")
            print("Set STUDY_TRACKER_ENDPOINT or sync_endpoint in settings.json.")
            return report

        days = self.completed_days()
        if not days:
            print("No completed days found to sync")
            return report

        selected = sorted(days)
        if max_days:
            selected = selected[-max_days:]

        print(f"Syncing {len(selected)} days of data...")
        for day in selected:
            if not force and day in self.ledger:
                report.skipped += 1
            elif self.sync_day(days[day]):
                report.synced += 1
            else:
                report.failed += 1
        return report

    def status(self) -> Dict:
        days = list(self.completed_days())
        pending = self.ledger.pending(days)
        return {
            "endpoint": self.endpoint,
            "device": self.uploader.device,
            "total_days": len(days),
            "synced_days": len(days) - len(pending),
            "pending_days": len(pending),
            "last_sync": self.ledger.last_synced,
        }
