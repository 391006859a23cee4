"""Shared utility functions for the ingestion pipeline."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

import pytz

MADRID_TZ = "Europe/Madrid"


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Handlers are attached only once per logger name, so collectors that are
    instantiated repeatedly do not emit duplicate lines.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        target = str(log_file.resolve())
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        ):
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def to_madrid(dt: datetime) -> datetime:
    """Convert datetime to Madrid local time. Naive datetimes are read as UTC."""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(pytz.timezone(MADRID_TZ))


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(pytz.UTC).isoformat()


def madrid_today_iso() -> str:
    """Today's date in Madrid (the gazette's reference timezone), ``YYYY-MM-DD``."""
    return to_madrid(datetime.now(pytz.UTC)).date().isoformat()


def atomic_write_json(path: Path, payload: Any, indent: int | None = 2) -> None:
    """Write JSON to ``path`` so readers only ever see a complete document.

    The payload is written to a temporary file in the same directory and then
    moved over the target with ``os.replace``.

    Raises:
        OSError: If the directory cannot be created or the write fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=indent)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
