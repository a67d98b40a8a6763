"""Logging setup for the ``retrycase`` logger hierarchy.

Modules log through stdlib loggers named ``retrycase.<area>``. This module
attaches a single handler to the ``retrycase`` logger with either a plain
text format or JSON lines rendered by orjson for log aggregation.

Example:
    >>> from retrycase.observability import configure_logging
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from retrycase.foundation.config import LoggingSettings

ROOT_LOGGER = "retrycase"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord has; anything else came in through ``extra=``
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, event, extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update({k: v for k, v in vars(record).items() if k not in _RESERVED})
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - shadows builtin but matches stdlib
    *,
    output: TextIO | None = None,
    settings: LoggingSettings | None = None,
) -> logging.Handler:
    """Configure the ``retrycase`` logger. Format: "text" (human) or "json" (machine).

    Unset arguments fall back to LoggingSettings (``RETRYCASE_LOG_*``).
    Calling again replaces the previously installed handler.
    """
    if settings is None and (level is None or format is None):
        from retrycase.foundation.config import get_settings
        settings = get_settings().logging
    level = (level or settings.level).upper()  # type: ignore[union-attr]
    fmt = format or settings.format  # type: ignore[union-attr]

    handler = logging.StreamHandler(output or sys.stderr)
    match fmt:
        case "text": handler.setFormatter(logging.Formatter(TEXT_FORMAT))
        case "json": handler.setFormatter(JsonFormatter())
        case _: raise ValueError(f"Unknown format: {fmt}. Use 'text' or 'json'")

    log = logging.getLogger(ROOT_LOGGER)
    for old in [h for h in log.handlers if getattr(h, "_retrycase", False)]:
        log.removeHandler(old)
    handler._retrycase = True  # type: ignore[attr-defined]
    log.addHandler(handler)
    log.setLevel(getattr(logging, level, logging.INFO))
    return handler
