"""Utilities for configuring wasaupdate logging consistently."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Accepted aliases for CLI/config inputs
LEVEL_ALIASES = {
    "CRITIC": "CRITICAL",
    "CRITICAL": "CRITICAL",
    "ERROR": "ERROR",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "INFO": "INFO",
    "DEBUG": "DEBUG",
}

DEFAULT_LEVEL = "WARNING"

# Separator added when log is not reset
LOG_RESTART_SEPARATOR = """

================================================================================
=== WASAUPDATE RUN - {timestamp} ===
================================================================================

"""


def normalize_log_level(level_name: str | None) -> str:
    """Return a normalized logging level name (defaults to WARNING)."""
    if not level_name:
        return DEFAULT_LEVEL
    return LEVEL_ALIASES.get(level_name.strip().upper(), DEFAULT_LEVEL)


def prepare_log_file(log_file: str | Path, reset_on_start: bool = True) -> None:
    """Prepare log file before configuring logging.

    If reset_on_start is True, the log file is deleted.
    If reset_on_start is False, a separator with timestamp is appended.
    """
    if not log_file:
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if not log_path.exists():
        return
    try:
        if reset_on_start:
            log_path.unlink()
        else:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(LOG_RESTART_SEPARATOR.format(timestamp=timestamp))
    except OSError as exc:
        # The file handler opens the file anyway, so only note it
        logging.getLogger(__name__).debug("Could not prepare log file %s: %s", log_path, exc)


def configure_logging(
    level_name: str | None,
    log_file: Optional[str | Path] = None,
    reset_on_start: bool = True,
) -> str:
    """Configure the root logger and an optional log file.

    Args:
        level_name: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file (optional).
        reset_on_start: If True, clear log file. If False, add restart separator.

    Returns:
        The normalized level name effectively applied.
    """
    normalized = normalize_log_level(level_name)
    numeric_level = getattr(logging, normalized, logging.WARNING)

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers:
        handler.setLevel(numeric_level)

    # httpx logs every request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            already_configured = any(
                isinstance(handler, logging.FileHandler)
                and getattr(handler, "baseFilename", None) == str(log_path.resolve())
                for handler in root_logger.handlers
            )
            if not already_configured:
                prepare_log_file(log_path, reset_on_start)

                file_handler = logging.FileHandler(log_path, encoding="utf-8")
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
                root_logger.addHandler(file_handler)
        except OSError as exc:
            logging.getLogger(__name__).warning("Failed to attach file handler %s: %s", log_file, exc)

    return normalized
