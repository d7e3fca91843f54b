#!/usr/bin/env python3
"""
HTTP upload of finished study days.

Each completed day goes out as one JSON document. The endpoint decides
what to do with repeats; remembering what was already sent is the job of
the sync ledger in sync.py.
"""

import platform
import socket
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from .models import DailyUsage

CLIENT_ID = "study-tracker/1.0"
GENERIC_HOSTNAMES = ("", "localhost", "unknown")


def _strip_local(name: str) -> str:
    return name[: -len(".local")] if name.endswith(".local") else name


def device_name() -> str:
    """Short machine name used to tag uploads."""
    try:
        candidates = [socket.gethostname(), platform.node()]
    except OSError:
        candidates = []

    for candidate in candidates:
        name = _strip_local(candidate)
        if name not in GENERIC_HOSTNAMES:
            return name
    return f"{platform.system().lower()}-{platform.machine()}"


def build_day_document(usage: DailyUsage, device: str, sent_at: datetime) -> Dict[str, Any]:
    """The JSON body uploaded for one day."""
    document = usage.to_dict()
    document.update(
        {
            "device": device,
            "client": CLIENT_ID,
            "sentAt": sent_at.isoformat(timespec="seconds"),
        }
    )
    return document


class UsageUploader:
    """Posts day documents to one endpoint over a reusable session."""

    def __init__(
        self,
        endpoint: str,
        auth_token: str = "",  # nosec B107
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.device = device_name()

        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/json"
        if auth_token:
            self.session.headers["Authorization"] = f"Bearer {auth_token}"

    def upload(self, usage: DailyUsage, sent_at: datetime) -> bool:
        """Send one day. Failures are printed and reported as False."""
        document = build_day_document(usage, self.device, sent_at)

        try:
            response = self.session.post(self.endpoint, json=document, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            print(f"[FAIL] Could not reach sync endpoint for {usage.date}: {e}")
            return False

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            print(f"[FAIL] Endpoint rejected {usage.date}: HTTP {response.status_code}")
            return False

        print(f"[OK] Synced {usage.date}: {usage.total_minutes} min")
        return True

    def close(self) -> None:
        self.session.close()
