#!/usr/bin/env python3
"""
Study Tracker
Tracks active study time per day and a daily login streak.
"""

import os
import signal
import threading
from typing import Optional

from .activity_monitor import TrackingLogger, VisibilityMonitor
from .config import Config, get_config
from .progression import (
    ProgressionEngine,
    format_streak_date,
    level_progress_percent,
    streak_benefit_message,
)
from .scheduler import SystemClock
from .storage import KeyValueStore, StreakStore, UsageStore
from .summary import build_weekly_summary
from .sync import UsageSync
from .time_tracking import TimeTracker
from .utils import default_pidfile, format_duration, running_daemon_pid


class StudyTracker:
    """
    Study Tracker - owns the time tracker and progression engine.

    Constructed once per process; components are created here and handed
    to each other explicitly.
    """

    def __init__(
        self,
        config: Config,
        data_dir: Optional[str] = None,
        verbose: Optional[bool] = None,
        clock=None,
    ):
        self.config = config
        self.data_dir = str(data_dir or config.data_dir)
        self.clock = clock or SystemClock()

        if verbose is None:
            verbose = config.verbose_logging
        self.logger = TrackingLogger(verbose=verbose)

        self.data_store = KeyValueStore(self.data_dir)
        self.time_tracker = TimeTracker(
            UsageStore(self.data_store),
            clock=self.clock,
            logger=self.logger,
            flush_interval=config.flush_interval,
            duration_interval=config.duration_interval,
            day_check_interval=config.day_check_interval,
        )
        self.progression = ProgressionEngine(
            StreakStore(self.data_store), clock=self.clock, logger=self.logger
        )
        self.visibility = VisibilityMonitor(visible=True)
        self.time_tracker.attach_visibility(self.visibility)

        self._stop_event = threading.Event()

    def start(self) -> None:
        """Record today's login and start tracking time."""
        print(f"Starting study tracker... Data will be saved to {self.data_dir}")
        self.progression.get_and_update()
        if self.visibility.visible:
            self.time_tracker.start_tracking()

    def run(self) -> None:
        """Start and block until stop() is called."""
        self._install_suspend_handlers()
        self.start()
        try:
            while not self._stop_event.wait(1.0):
                pass
        finally:
            self.shutdown()

    def stop(self) -> None:
        self._stop_event.set()

    def shutdown(self) -> None:
        """Flush any open session before exit."""
        self.time_tracker.shutdown()

    def _install_suspend_handlers(self) -> None:
        # Terminal suspend (Ctrl-Z) and resume act as hide/show
        if not hasattr(signal, "SIGTSTP"):
            return
        signal.signal(signal.SIGTSTP, self._handle_suspend)
        signal.signal(signal.SIGCONT, self._handle_resume)

    def _handle_suspend(self, signum, frame):
        self.visibility.set_visible(False)
        signal.signal(signal.SIGTSTP, signal.SIG_DFL)
        os.kill(os.getpid(), signal.SIGTSTP)

    def _handle_resume(self, signum, frame):
        signal.signal(signal.SIGTSTP, self._handle_suspend)
        self.visibility.set_visible(True)


def print_status(tracker: StudyTracker) -> None:
    """Print this week's usage and the streak record."""
    today = tracker.clock.now().date()
    summary = build_weekly_summary(tracker.time_tracker.weekly_usage, today)

    print(f"Week of {summary.days[0].date}")
    print("=" * 40)
    for day in summary.days:
        marker = " <- today" if day.is_today else ""
        print(f"  {day.label}  {day.date}  {format_duration(day.minutes):>8}{marker}")
    print(f"\nTotal: {format_duration(summary.total_minutes)}")
    print(f"Average: {format_duration(summary.average_minutes)} per day")

    best = summary.most_productive_day
    if best and best.minutes > 0:
        print(f"Most productive: {best.label} ({format_duration(best.minutes)})")

    streak = tracker.progression.load()
    print_streak(streak)


def print_streak(streak) -> None:
    print(f"\nStreak: {streak.current_streak} day(s) (longest {streak.longest_streak})")
    print(f"Level {streak.level}: {streak.total_points}/{streak.points_to_next_level} points "
          f"({level_progress_percent(streak)}%)")
    print(f"Last login: {format_streak_date(streak.last_login_date)}")
    print(streak_benefit_message(streak.current_streak))


def print_sync_status(status) -> None:
    print(f"Endpoint: {status['endpoint'] or '(not configured)'}")
    print(f"Device: {status['device']}")
    print(f"Synced: {status['synced_days']}/{status['total_days']} completed days")
    print(f"Last synced day: {status['last_sync'] or 'Never'}")


def print_help() -> None:
    print("Study Tracker")
    print("Usage: study-tracker [command] [options]")
    print("Commands:")
    print("  run             Track active time in the foreground (default)")
    print("  status          Show this week's usage and your streak")
    print("  streak          Record today's login and show your streak")
    print("  reset           Delete all recorded time (stop the daemon first)")
    print("  reset-streak    Delete the streak record")
    print("  sync [--force]  Upload completed days to the sync endpoint")
    print("  sync --status   Show which completed days have been uploaded")
    print("Options:")
    print("  --quiet, -q        Run in quiet mode (no logging)")
    print("  --data-dir DIR     Store data in DIR")
    print("  --help, -h         Show this help message")


def main():
    """Main entry point."""
    import sys

    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        print_help()
        return

    verbose = None
    if "--quiet" in args or "-q" in args:
        verbose = False

    data_dir = None
    if "--data-dir" in args:
        index = args.index("--data-dir")
        if index + 1 >= len(args):
            print("Missing value for --data-dir")
            return
        data_dir = args[index + 1]

    commands = [arg for arg in args if not arg.startswith("-") and arg != data_dir]
    command = commands[0] if commands else "run"

    config = get_config()

    if command == "sync":
        usage_sync = UsageSync(
            data_dir=str(data_dir or config.data_dir),
            endpoint=config.sync_endpoint,
            auth_token=config.sync_auth_token,
        )
        if "--status" in args:
            print_sync_status(usage_sync.status())
            return

        report = usage_sync.sync_all(force="--force" in args)
        print(
            f"Sync completed: {report.synced} synced, "
            f"{report.failed} failed, {report.skipped} skipped"
        )
        return

    if command not in ("run", "status", "streak", "reset", "reset-streak"):
        print(f"Unknown command: {command}")
        print("Use --help for usage information")
        return

    if command == "reset":
        # A running daemon would write its in-memory totals back on its next save
        daemon_pid = running_daemon_pid(default_pidfile())
        if daemon_pid is not None:
            print(f"The tracker daemon is running (PID {daemon_pid}).")
            print("Stop it first with: study-tracker-daemon stop")
            return

    tracker = StudyTracker(config, data_dir=data_dir, verbose=verbose)

    if command == "status":
        print_status(tracker)
    elif command == "streak":
        print_streak(tracker.progression.get_and_update())
    elif command == "reset":
        tracker.time_tracker.reset_all_data()
        print("Time tracking data has been reset.")
    elif command == "reset-streak":
        tracker.progression.reset()
        print("Streak data has been reset.")
    else:
        try:
            tracker.run()
        except KeyboardInterrupt:
            print("\nReceived interrupt signal")
        finally:
            tracker.stop()
            print("Study tracker stopped")


if __name__ == "__main__":
    main()
