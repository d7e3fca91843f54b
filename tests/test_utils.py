"""Tests for shared helpers."""

import os
import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path
from unittest.mock import patch

from study_tracker.utils import (
    date_key,
    default_pidfile,
    get_config_directory,
    get_data_directory,
    parse_date_key,
    read_pid,
    running_daemon_pid,
)


class TestDirectories(unittest.TestCase):
    """Test platform data and config directories."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil

        shutil.rmtree(self.temp_dir)

    @patch("study_tracker.utils.sys.platform", "linux")
    def test_xdg_data_home(self):
        with patch.dict(os.environ, {"XDG_DATA_HOME": self.temp_dir}):
            data_dir = get_data_directory()

        self.assertEqual(data_dir, Path(self.temp_dir) / "study-tracker" / "data")
        self.assertTrue(data_dir.is_dir())

    @patch("study_tracker.utils.sys.platform", "linux")
    def test_home_fallback(self):
        env = {k: v for k, v in os.environ.items() if k != "XDG_DATA_HOME"}
        with patch.dict(os.environ, env, clear=True):
            with patch("study_tracker.utils.Path.home", return_value=Path(self.temp_dir)):
                data_dir = get_data_directory()

        expected = Path(self.temp_dir) / ".local" / "share" / "study-tracker" / "data"
        self.assertEqual(data_dir, expected)

    @patch("study_tracker.utils.sys.platform", "darwin")
    def test_macos_directory(self):
        with patch("study_tracker.utils.Path.home", return_value=Path(self.temp_dir)):
            config_dir = get_config_directory()

        expected = (
            Path(self.temp_dir) / "Library" / "Application Support" / "StudyTracker" / "config"
        )
        self.assertEqual(config_dir, expected)
        self.assertFalse(config_dir.exists())


class TestDateKeys(unittest.TestCase):
    """Test date key helpers."""

    def test_date_key_from_datetime(self):
        self.assertEqual(date_key(datetime(2024, 1, 5, 23, 59)), "2024-01-05")

    def test_date_key_from_date(self):
        self.assertEqual(date_key(date(2024, 12, 31)), "2024-12-31")

    def test_parse_date_key(self):
        self.assertEqual(parse_date_key("2024-02-29"), date(2024, 2, 29))

    def test_parse_invalid_date_key(self):
        with self.assertRaises(ValueError):
            parse_date_key("2024-13-01")


class TestPidfileHelpers(unittest.TestCase):
    """Test pidfile reading and liveness checks."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.pidfile = os.path.join(self.temp_dir, "tracker.pid")

    def tearDown(self):
        import shutil

        shutil.rmtree(self.temp_dir)

    def test_default_pidfile(self):
        self.assertEqual(default_pidfile().name, "study_tracker.pid")

    def test_read_pid(self):
        self.assertIsNone(read_pid(self.pidfile))

        with open(self.pidfile, "w") as f:
            f.write("4321\n")
        self.assertEqual(read_pid(self.pidfile), 4321)

        with open(self.pidfile, "w") as f:
            f.write("not a pid")
        self.assertIsNone(read_pid(self.pidfile))

    @patch("os.kill")
    def test_running_daemon_pid(self, mock_kill):
        with open(self.pidfile, "w") as f:
            f.write("4321")

        self.assertEqual(running_daemon_pid(self.pidfile), 4321)
        mock_kill.assert_called_with(4321, 0)

        mock_kill.side_effect = ProcessLookupError
        self.assertIsNone(running_daemon_pid(self.pidfile))
