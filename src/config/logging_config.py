# src/config/logging_config.py

"""Logging for the monitor daemon and the one-off CLI commands.

Each launch gets its own ``logs/run_YYYYmmdd_HHMMSS.log``.  The daemon
can stay up for weeks, so the run log rotates by size and only the
newest ``Settings.LOG_KEEP_RUNS`` run logs are kept on disk.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from src.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s "
    "(%(module)s:%(lineno)d) %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def prune_run_logs(logs_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest *keep* run logs; return what was removed.

    Rotated segments (``run_*.log.1`` ...) go with their run.
    """
    runs = sorted(logs_dir.glob("run_*.log"), reverse=True)
    removed: list[Path] = []
    for stale in runs[keep:]:
        for path in [stale, *logs_dir.glob(f"{stale.name}.*")]:
            path.unlink(missing_ok=True)
            removed.append(path)
    return removed


def setup_logging(verbose: bool = False) -> Path:
    """Attach a rotating run log and a stderr handler to ``price_watch``.

    The console shows WARNING and above, or INFO with *verbose*.  Calling
    this again in the same process keeps the existing handlers.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    logger = logging.getLogger("price_watch")
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return log_file

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=Settings.LOG_MAX_BYTES,
        backupCount=Settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    removed = prune_run_logs(logs_dir, Settings.LOG_KEEP_RUNS)
    logger.info(
        "Logging to %s (%d old log files pruned)", log_file, len(removed),
    )
    return log_file
