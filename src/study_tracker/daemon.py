#!/usr/bin/env python3
"""
Background service for the study tracker.
Detaches from the terminal and keeps a pidfile so the CLI can find it.
"""

import fcntl
import os
import signal
import sys
import time
from typing import Optional

from .config import get_config
from .core import StudyTracker
from .utils import default_pidfile, read_pid, running_daemon_pid


class TrackerDaemon:
    """Runs a StudyTracker detached, tracked through a pidfile."""

    def __init__(self, pidfile: Optional[str] = None):
        self.pidfile = pidfile or str(default_pidfile())
        self.tracker: Optional[StudyTracker] = None

    def _fork(self, stage: int) -> bool:
        """Fork and let the parent exit. Returns False if forking failed."""
        try:
            pid = os.fork()
        except OSError as e:
            sys.stderr.write(f"Fork #{stage} failed: {e}\n")
            sys.exit(1)
            return False

        if pid > 0:
            sys.exit(0)
        return True

    def daemonize(self):
        """Detach into a new session and record our PID."""
        if not self._fork(1):
            return

        os.chdir("/")
        os.setsid()
        os.umask(0o077)

        # Second fork so the daemon can never reacquire a terminal
        if not self._fork(2):
            return

        sys.stdout.flush()
        sys.stderr.flush()
        self._write_pidfile()

    def _write_pidfile(self) -> None:
        try:
            with open(self.pidfile, "w") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                f.write(str(os.getpid()))
                f.flush()
        except BlockingIOError:
            sys.stderr.write(f"Pidfile {self.pidfile} is locked by another daemon\n")
            sys.exit(1)

    def _remove_pidfile(self) -> None:
        if os.path.exists(self.pidfile):
            os.remove(self.pidfile)

    def start(self):
        pid = running_daemon_pid(self.pidfile)
        if pid is not None:
            print(f"Tracker daemon already running (PID {pid})")
            return

        # Anything left over belongs to a dead process
        self._remove_pidfile()

        print("Starting study tracker daemon...")
        self.daemonize()

        for signum in (signal.SIGTERM, signal.SIGINT):
            signal.signal(signum, self._signal_handler)

        self.tracker = StudyTracker(get_config(), verbose=False)
        self.tracker.run()

    def stop(self):
        pid = read_pid(self.pidfile)
        if pid is None:
            if os.path.exists(self.pidfile):
                print("Tracker daemon not running (unreadable pidfile removed)")
                self._remove_pidfile()
            else:
                print("Tracker daemon not running")
            return

        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            print("Tracker daemon not running (stale pidfile removed)")
        except OSError as e:
            print(f"Could not signal tracker daemon: {e}")
            return
        else:
            print(f"Sent SIGTERM to tracker daemon (PID {pid})")
        self._remove_pidfile()

    def restart(self):
        self.stop()
        time.sleep(1)
        self.start()

    def status(self):
        pid = running_daemon_pid(self.pidfile)
        if pid is not None:
            print(f"Tracker daemon running (PID {pid})")
        elif os.path.exists(self.pidfile):
            print("Tracker daemon not running (stale pidfile removed)")
            self._remove_pidfile()
        else:
            print("Tracker daemon not running")

    def _signal_handler(self, signum, frame):
        """Flush tracked time and exit on termination signals."""
        if self.tracker:
            self.tracker.stop()
            self.tracker.shutdown()
        self._remove_pidfile()
        sys.exit(0)


def main():
    """Entry point for study-tracker-daemon."""
    daemon = TrackerDaemon()
    commands = {
        "start": daemon.start,
        "stop": daemon.stop,
        "restart": daemon.restart,
        "status": daemon.status,
    }

    if len(sys.argv) != 2 or sys.argv[1] not in commands:
        print("Usage: study-tracker-daemon {start|stop|restart|status}")
        sys.exit(1)

    commands[sys.argv[1]]()


if __name__ == "__main__":
    main()
