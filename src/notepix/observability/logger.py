"""JSON-lines logging for notepix.

Each record becomes one JSON object per line, e.g.::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "INFO",
     "logger": "notepix.storage", "message": "Upload complete",
     "op": "upload", "path": "2026/10/19/3f0c....png"}

Structured fields go in ``extra={"extra_fields": {...}}``.  The level of
loggers created here defaults to ``$NOTEPIX_LOG_LEVEL`` (``WARNING`` when
unset), so an editor host stays quiet unless asked otherwise.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any

LOG_LEVEL_ENV = "NOTEPIX_LOG_LEVEL"

_BASE_KEYS = ("ts", "level", "logger", "message")


class StructuredFormatter(logging.Formatter):
    """Render a record as a single-line JSON object.

    Extra fields never replace the base keys; a clashing field is kept
    under ``extra.<name>`` instead.  When the record carries a notepix
    error, its ``code`` is added as ``error_code``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in (getattr(record, "extra_fields", None) or {}).items():
            entry[f"extra.{key}" if key in _BASE_KEYS else key] = value

        if record.exc_info and record.exc_info[1] is not None:
            code = getattr(record.exc_info[1], "code", None)
            if code is not None:
                entry["error_code"] = getattr(code, "value", code)
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        return resolved if isinstance(resolved, int) else logging.WARNING
    return level


def get_logger(
    name: str = "notepix",
    *,
    level: int | str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the JSON logger called *name*, configuring it on first use.

    Parameters
    ----------
    level:
        ``int`` or level name.  ``None`` reads :data:`LOG_LEVEL_ENV`.
        Unknown names fall back to ``WARNING``.
    stream:
        Handler output; ``sys.stderr`` by default.

    Only the first call for a given *name* attaches a handler; later calls
    return the same logger untouched.
    """
    logger = logging.getLogger(name)
    if getattr(logger, "_notepix_configured", False):
        return logger

    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    logger._notepix_configured = True  # type: ignore[attr-defined]
    return logger
