"""Root logger setup for lms-service.

LOG_JSON picks the line format written to stdout:

  TextFormatter       ``<utc time> <LEVEL> <logger>  <message>``, with the
                      source location appended from WARNING up.
  JsonLinesFormatter  one object per line; request context attached by
                      RequestContextMiddleware becomes top-level keys.

Counters and histograms are in lms/core/metrics.py.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

# Attributes the request middleware sets through ``extra=``
REQUEST_FIELDS = (
    "request_id",
    "method",
    "path",
    "user_id",
    "status_code",
    "duration_ms",
)

# Held at WARNING or above whatever LOG_LEVEL asks for
NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, UTC).isoformat(
        timespec="milliseconds"
    )


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{_timestamp(record)} {record.levelname:<8} {record.name}  "
            f"{record.getMessage()}"
        )
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonLinesFormatter(logging.Formatter):
    """Context keys missing from a record are left out of its line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in REQUEST_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    # getLevelName hands back a "Level X" string for names it does not know
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Send every record to stdout in one format, replacing prior handlers."""
    level = resolve_level(level_name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLinesFormatter() if json_format else TextFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    floor = max(level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(floor)
