"""Tests for daemon module functionality."""

import os
import signal
import tempfile
import unittest
from unittest.mock import Mock, patch

from study_tracker.daemon import TrackerDaemon, main


class TestTrackerDaemon(unittest.TestCase):
    """Test cases for TrackerDaemon class."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.pid_file = os.path.join(self.temp_dir, "test.pid")

        # Never signal real processes from tests
        self.kill_patcher = patch("os.kill")
        self.mock_kill = self.kill_patcher.start()

        self.daemon = TrackerDaemon(pidfile=self.pid_file)

    def tearDown(self):
        self.kill_patcher.stop()
        import shutil

        shutil.rmtree(self.temp_dir)

    def write_pid(self, value="12345"):
        with open(self.pid_file, "w") as f:
            f.write(value)

    def test_initialization(self):
        self.assertEqual(self.daemon.pidfile, self.pid_file)
        self.assertIsNone(self.daemon.tracker)
        self.assertIn("study_tracker.pid", TrackerDaemon().pidfile)

    @patch("os.fork")
    @patch("os.setsid")
    @patch("os.umask")
    @patch("os.chdir")
    @patch("sys.exit")
    def test_daemonize_success(self, mock_exit, mock_chdir, mock_umask, mock_setsid, mock_fork):
        """Test successful daemonization."""
        mock_fork.return_value = 0

        with patch("fcntl.flock"):
            self.daemon.daemonize()

        self.assertEqual(mock_fork.call_count, 2)
        mock_setsid.assert_called_once()
        mock_chdir.assert_called_with("/")
        mock_umask.assert_called_with(0o077)
        mock_exit.assert_not_called()
        with open(self.pid_file) as f:
            self.assertEqual(f.read(), str(os.getpid()))

    @patch("os.fork")
    @patch("sys.exit")
    def test_daemonize_parent_exit(self, mock_exit, mock_fork):
        mock_fork.return_value = 123
        mock_exit.side_effect = SystemExit

        with self.assertRaises(SystemExit):
            self.daemon.daemonize()

        mock_exit.assert_called_with(0)

    @patch("os.fork")
    @patch("sys.exit")
    def test_daemonize_fork_error(self, mock_exit, mock_fork):
        mock_fork.side_effect = OSError("Fork failed")

        with patch("sys.stderr.write"):
            self.daemon.daemonize()

        mock_exit.assert_called_with(1)

    def test_start_already_running(self):
        self.write_pid()

        with patch("builtins.print") as mock_print:
            self.daemon.start()

        self.mock_kill.assert_called_with(12345, 0)
        mock_print.assert_called_with("Tracker daemon already running (PID 12345)")

    @patch("study_tracker.daemon.get_config")
    @patch("study_tracker.daemon.StudyTracker")
    @patch("signal.signal")
    def test_start_stale_pid(self, mock_signal, mock_tracker, mock_get_config):
        """Test start with a stale PID file."""
        self.write_pid()
        self.mock_kill.side_effect = OSError

        with patch.object(self.daemon, "daemonize") as mock_daemonize:
            with patch("builtins.print"):
                self.daemon.start()

        self.assertFalse(os.path.exists(self.pid_file))
        mock_daemonize.assert_called_once()
        mock_tracker.assert_called_once_with(mock_get_config.return_value, verbose=False)
        mock_tracker.return_value.run.assert_called_once()
        handled = [c.args[0] for c in mock_signal.call_args_list]
        self.assertIn(signal.SIGTERM, handled)
        self.assertIn(signal.SIGINT, handled)

    def test_stop_not_running(self):
        with patch("builtins.print") as mock_print:
            self.daemon.stop()

        mock_print.assert_called_with("Tracker daemon not running")

    def test_stop_running(self):
        self.write_pid()

        with patch("builtins.print") as mock_print:
            self.daemon.stop()

        self.mock_kill.assert_called_with(12345, signal.SIGTERM)
        mock_print.assert_called_with("Sent SIGTERM to tracker daemon (PID 12345)")
        self.assertFalse(os.path.exists(self.pid_file))

    def test_stop_invalid_pidfile(self):
        self.write_pid("garbage")

        with patch("builtins.print") as mock_print:
            self.daemon.stop()

        mock_print.assert_called_with("Tracker daemon not running (unreadable pidfile removed)")
        self.assertFalse(os.path.exists(self.pid_file))

    def test_stop_dead_process(self):
        self.write_pid()
        self.mock_kill.side_effect = ProcessLookupError

        with patch("builtins.print") as mock_print:
            self.daemon.stop()

        mock_print.assert_called_with("Tracker daemon not running (stale pidfile removed)")
        self.assertFalse(os.path.exists(self.pid_file))

    def test_stop_permission_error_keeps_pidfile(self):
        self.write_pid()
        self.mock_kill.side_effect = PermissionError("not allowed")

        with patch("builtins.print") as mock_print:
            self.daemon.stop()

        mock_print.assert_called_with("Could not signal tracker daemon: not allowed")
        self.assertTrue(os.path.exists(self.pid_file))

    @patch("study_tracker.daemon.time.sleep")
    def test_restart(self, mock_sleep):
        with patch.object(self.daemon, "stop") as mock_stop:
            with patch.object(self.daemon, "start") as mock_start:
                self.daemon.restart()

        mock_stop.assert_called_once()
        mock_sleep.assert_called_once_with(1)
        mock_start.assert_called_once()

    def test_status_without_pidfile(self):
        with patch("builtins.print") as mock_print:
            self.daemon.status()

        mock_print.assert_called_with("Tracker daemon not running")

    def test_status(self):
        self.write_pid()

        with patch("builtins.print") as mock_print:
            self.daemon.status()
        mock_print.assert_called_with("Tracker daemon running (PID 12345)")

        self.mock_kill.side_effect = OSError
        with patch("builtins.print") as mock_print:
            self.daemon.status()
        mock_print.assert_called_with("Tracker daemon not running (stale pidfile removed)")
        self.assertFalse(os.path.exists(self.pid_file))

    def test_signal_handler_flushes_and_exits(self):
        """Termination flushes tracked time before exit."""
        self.write_pid()
        tracker = Mock()
        self.daemon.tracker = tracker

        with self.assertRaises(SystemExit) as ctx:
            self.daemon._signal_handler(signal.SIGTERM, None)

        self.assertEqual(ctx.exception.code, 0)
        tracker.stop.assert_called_once()
        tracker.shutdown.assert_called_once()
        self.assertFalse(os.path.exists(self.pid_file))


class TestDaemonMain(unittest.TestCase):
    """Test cases for the daemon command line."""

    @patch("study_tracker.daemon.TrackerDaemon")
    def test_dispatch(self, mock_daemon_class):
        daemon = mock_daemon_class.return_value
        for command in ("start", "stop", "status"):
            with patch("sys.argv", ["study-tracker-daemon", command]):
                main()
            getattr(daemon, command).assert_called_once()

    @patch("study_tracker.daemon.TrackerDaemon")
    def test_restart_dispatch(self, mock_daemon_class):
        with patch("sys.argv", ["study-tracker-daemon", "restart"]):
            main()

        mock_daemon_class.return_value.restart.assert_called_once()

    @patch("study_tracker.daemon.TrackerDaemon")
    def test_usage_errors(self, mock_daemon_class):
        for argv in (["study-tracker-daemon"], ["study-tracker-daemon", "explode"]):
            with patch("sys.argv", argv), patch("builtins.print"):
                with self.assertRaises(SystemExit) as ctx:
                    main()
            self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
