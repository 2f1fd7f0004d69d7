"""Structured JSON logging for dotclaude.

Writes JSONL to ``<log_dir>/dotclaude.log`` with rotation (5MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_LOG_FILENAME = "dotclaude.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3
_EXTRA_FIELDS = ("command", "returncode", "path", "server")


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def setup_logging(log_dir: Path, *, verbose: bool = False) -> logging.Logger:
    """Set up structured JSON logging to ``<log_dir>/dotclaude.log``.

    With *verbose*, also echo DEBUG records to stderr.
    """
    logger = logging.getLogger("dotclaude")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        have_file_handler = False
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                have_file_handler = True
                continue
            # Different path: drop the stale handler.
            logger.removeHandler(h)
            h.close()

        if not have_file_handler:
            handler = RotatingFileHandler(
                str(log_path),
                maxBytes=_MAX_BYTES,
                backupCount=_BACKUP_COUNT,
            )
            handler.setFormatter(_JsonFormatter())
            logger.addHandler(handler)

        has_stream = any(type(h) is logging.StreamHandler for h in logger.handlers)
        if verbose and not has_stream:
            stream = logging.StreamHandler()
            stream.setLevel(logging.DEBUG)
            stream.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
            logger.addHandler(stream)

        logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
