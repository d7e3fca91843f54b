"""Tests for the wall clock and repeating timers."""

import threading
import unittest
from datetime import datetime
from unittest.mock import patch

from study_tracker.scheduler import RepeatingTimer, SystemClock


class TestRepeatingTimer(unittest.TestCase):
    """Test cases for RepeatingTimer."""

    def test_fires_repeatedly_until_cancelled(self):
        fired = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) >= 3:
                fired.set()

        timer = RepeatingTimer(0.01, callback)
        timer.start()
        try:
            self.assertTrue(fired.wait(2))
        finally:
            timer.cancel()
            timer.join(2)

        self.assertGreaterEqual(len(calls), 3)
        self.assertTrue(timer.cancelled)
        self.assertFalse(timer.is_alive())

    def test_cancel_before_first_tick(self):
        calls = []
        timer = RepeatingTimer(10, lambda: calls.append(1))
        timer.start()
        timer.cancel()
        timer.join(2)

        self.assertEqual(calls, [])
        self.assertFalse(timer.is_alive())

    def test_callback_errors_do_not_stop_timer(self):
        done = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        timer = RepeatingTimer(0.01, callback)
        with patch("builtins.print") as mock_print:
            timer.start()
            try:
                self.assertTrue(done.wait(2))
            finally:
                timer.cancel()
                timer.join(2)

        mock_print.assert_any_call("Error in timer callback: boom")

    def test_is_daemon_thread(self):
        timer = RepeatingTimer(1, lambda: None)
        self.assertTrue(timer.daemon)


class TestSystemClock(unittest.TestCase):
    """Test cases for SystemClock."""

    def test_now_is_local_time(self):
        before = datetime.now()
        now = SystemClock().now()
        after = datetime.now()

        self.assertLessEqual(before, now)
        self.assertLessEqual(now, after)

    def test_schedule_repeating_starts_timer(self):
        timer = SystemClock().schedule_repeating(60, lambda: None)
        try:
            self.assertIsInstance(timer, RepeatingTimer)
            self.assertTrue(timer.is_alive())
        finally:
            timer.cancel()
            timer.join(2)
