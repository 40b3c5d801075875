# product_detector/config/logging_config.py

"""Per-run logging for the detector CLI.

Every launch writes ``logs/run_<YYYYMMDD_HHMMSS>.log`` and keeps only
the newest ``Settings.LOG_RETENTION`` run files, since watch mode can
be launched many times a day.  The ``product_detector`` logger owns
both handlers; module loggers (``product_detector.scheduler``,
``product_detector.strategies.mango`` ...) propagate into it.

The console only shows warnings unless ``PD_DEBUG`` is set or the
caller asks for verbose output.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from product_detector.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RUN_GLOB = "run_*.log"


def _prune_old_runs(logs_dir: Path, keep: int) -> int:
    """Delete all but the newest *keep* run logs; returns how many went."""
    runs = sorted(logs_dir.glob(_RUN_GLOB), key=lambda p: p.name)
    stale = runs[:-keep] if keep > 0 else runs
    for path in stale:
        path.unlink(missing_ok=True)
    return len(stale)


def setup_logging(verbose: bool = False) -> Path:
    """Attach file and console handlers to the ``product_detector`` logger.

    Args:
        verbose: Show DEBUG output on stderr as well as in the file.

    Returns:
        Path of this run's log file.  Repeated calls keep the handlers
        of the first call.
    """
    logs_dir = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    detector_logger = logging.getLogger("product_detector")
    detector_logger.setLevel(logging.DEBUG)
    if detector_logger.handlers:
        return log_file

    removed = _prune_old_runs(logs_dir, Settings.LOG_RETENTION - 1)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.DEBUG if verbose or Settings.DEBUG else logging.WARNING
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, _DATE_FORMAT)
    )

    detector_logger.addHandler(file_handler)
    detector_logger.addHandler(console_handler)
    detector_logger.info(
        "Logging to %s (%d old run logs removed)", log_file, removed
    )
    return log_file
