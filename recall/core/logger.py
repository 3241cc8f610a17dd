"""Structured JSON logging for Recall.

Every record is emitted as one JSON object with a timestamp, level and
message, plus any ``extra`` fields. Records logged while a bookmark is being
analysed carry its ``bookmark_id`` so one bookmark's lifecycle can be
followed through the log.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON objects.

    Output format:
        {"ts": "2026-10-19T08:00:00.000000+00:00", "level": "INFO",
         "msg": "Bookmark added", "logger": "recall.core.store",
         "bookmark_id": "5f0c..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.name and record.name != "root":
            entry["logger"] = record.name

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class BookmarkLoggerAdapter(logging.LoggerAdapter):
    """Adds ``bookmark_id`` to every record logged through it."""

    def __init__(self, logger: logging.Logger, bookmark_id: str):
        super().__init__(logger, {"bookmark_id": bookmark_id})

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["bookmark_id"] = self.extra["bookmark_id"]
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route the root logger through a single JSON handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Output stream, stderr by default.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)


def get_bookmark_logger(name: str, bookmark_id: str) -> BookmarkLoggerAdapter:
    """Get a logger that stamps ``bookmark_id`` on every message.

    Example:
        log = get_bookmark_logger(__name__, bookmark.id)
        log.info("Analysis started")
        # {"ts": "...", "level": "INFO", "msg": "Analysis started", "bookmark_id": "..."}
    """
    return BookmarkLoggerAdapter(get_logger(name), bookmark_id)


_logging_configured: bool = False


def ensure_logging_configured(level: str = "INFO") -> None:
    """Configure logging once; later calls are no-ops."""
    global _logging_configured
    if not _logging_configured:
        setup_logging(level)
        _logging_configured = True


def reset_logging() -> None:
    """Forget the configuration and detach root handlers (used by tests)."""
    global _logging_configured
    _logging_configured = False

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
