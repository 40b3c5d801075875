# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from product_detector.config.logging_config import _prune_old_runs, setup_logging
from product_detector.config.settings import Settings


def _reset_detector_logger() -> None:
    detector_logger = logging.getLogger("product_detector")
    for handler in list(detector_logger.handlers):
        handler.close()
        detector_logger.removeHandler(handler)


class TestLoggingConfig(unittest.TestCase):
    """Verify handlers, file naming and retention."""

    def setUp(self) -> None:
        """Log into a scratch directory with a clean logger."""
        _reset_detector_logger()
        self._tmp = tempfile.TemporaryDirectory()
        self.logs_dir = Path(self._tmp.name)
        patcher = patch.object(Settings, "LOGS_DIR", self.logs_dir)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        _reset_detector_logger()
        self._tmp.cleanup()

    def _handlers(self) -> list[logging.Handler]:
        return logging.getLogger("product_detector").handlers

    def test_log_file_created_in_logs_dir(self) -> None:
        """The run file lives in LOGS_DIR and is named by timestamp."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, self.logs_dir)
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_handler_levels(self) -> None:
        """The file gets everything; the console only warnings."""
        setup_logging()
        file_handlers = [
            h for h in self._handlers() if isinstance(h, logging.FileHandler)
        ]
        console_handlers = [
            h for h in self._handlers()
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(len(console_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        self.assertEqual(console_handlers[0].level, logging.WARNING)

    def test_verbose_console(self) -> None:
        """verbose=True lowers the console level to DEBUG."""
        setup_logging(verbose=True)
        console = [
            h for h in self._handlers()
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(console[0].level, logging.DEBUG)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """A second call keeps the first handlers."""
        setup_logging()
        setup_logging()
        self.assertEqual(len(self._handlers()), 2)

    def test_module_loggers_reach_file(self) -> None:
        """Child loggers propagate into the run file."""
        log_path = setup_logging()
        logging.getLogger("product_detector.scheduler").info("retry marker")
        for handler in self._handlers():
            handler.flush()
        self.assertIn("retry marker", log_path.read_text(encoding="utf-8"))

    def test_old_runs_pruned(self) -> None:
        """Only the newest LOG_RETENTION run files survive a launch."""
        for day in range(1, 6):
            (self.logs_dir / f"run_2026010{day}_120000.log").write_text("")
        (self.logs_dir / "notes.txt").write_text("keep")
        with patch.object(Settings, "LOG_RETENTION", 3):
            log_path = setup_logging()
        remaining = sorted(p.name for p in self.logs_dir.glob("run_*.log"))
        self.assertEqual(len(remaining), 3)
        self.assertIn(log_path.name, remaining)
        self.assertIn("run_20260105_120000.log", remaining)
        self.assertTrue((self.logs_dir / "notes.txt").exists())


class TestPruneOldRuns(unittest.TestCase):
    """Verify the retention helper on its own."""

    def test_keep_zero_removes_all(self) -> None:
        """keep=0 clears every run file."""
        with tempfile.TemporaryDirectory() as tmp:
            logs_dir = Path(tmp)
            (logs_dir / "run_20260101_000000.log").write_text("")
            self.assertEqual(_prune_old_runs(logs_dir, 0), 1)
            self.assertEqual(list(logs_dir.iterdir()), [])


if __name__ == "__main__":
    unittest.main()
