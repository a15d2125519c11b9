import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# SDK loggers never go below WARNING.
QUIET_LOGGERS = ("pyVmomi", "pyVim")


def parse_log_level(level: object) -> int:
    """Turn 'info' / 'DEBUG' / 20 into a logging level, or raise RuntimeError naming the bad value."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    raise RuntimeError(
        f"Invalid log level {level!r} (expected one of DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )


def _open_log_file(log_dir: Path) -> Optional[logging.Handler]:
    """Create dvs-nioc_<timestamp>.log under log_dir; None (with an error logged) if that is not possible."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"dvs-nioc_{datetime.now().strftime('%Y-%m-%d__%H_%M_%S')}.log"
        return logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except PermissionError as exc:
        logging.getLogger(__name__).error(
            "File logging disabled, %s is not writable for uid=%s: %s",
            log_dir,
            os.getuid(),
            exc,
        )
    except OSError as exc:
        logging.getLogger(__name__).error("File logging disabled, cannot create a log file in %s: %s", log_dir, exc)
    return None


def configure_logging(level: object = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Reset the root logger: stderr handler always, plus a timestamped file in log_dir when given.

    stdout is left to command output (the `show` table). Raises RuntimeError for an unknown level,
    before any handler is touched.
    """
    numeric_level = parse_log_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    if log_dir:
        file_handler = _open_log_file(log_dir)
        if file_handler is not None:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
            root.info("Logging to file: %s", file_handler.baseFilename)
