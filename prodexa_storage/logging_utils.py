"""
JSON log output for list storage.

Every record becomes one JSON line. Context passed through ``extra``
(feature name, duplicate counts, ...) is kept as top-level keys so log
collectors can filter on it.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class StructuredJsonFormatter(logging.Formatter):
    """Formats records as ``{"timestamp", "level", "logger", "message", ...extra}``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            entry[key] = value

        return json.dumps(entry, default=str)


def configure_structured_logging(
    level: int | str = logging.INFO,
    logger_name: str | None = None,
) -> logging.Logger:
    """Send a logger's output to stdout as JSON lines.

    Existing handlers on the logger are replaced, so calling this twice
    does not duplicate output.

    Args:
        level: Level name or number
        logger_name: Logger to configure (root logger if None)
    """
    logger = logging.getLogger(logger_name)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


class FeatureLoggerAdapter(logging.LoggerAdapter):
    """Adds the feature name to every record's extras.

    Per-call ``extra`` values are merged with the adapter's own.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
