"""Logging setup for the geocode server.

Modules log with logging.getLogger(__name__) and structured extra= fields.
configure_logging() installs one stderr handler with a JSON formatter that
redacts credential fields (stdout is reserved for the MCP stdio transport).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Iterable, Optional, TextIO

SENSITIVE_KEYS_DEFAULT: set[str] = {
    "api_key",
    "key",
    "authorization",
    "token",
    "secret",
}

# Standard LogRecord attributes that are not user extras
_EXCLUDED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _extras(record: LogRecord, sensitive_keys: set[str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _EXCLUDED_ATTRS or key.startswith("_"):
            continue
        data[key] = "[REDACTED]" if key.lower() in sensitive_keys else value
    return data


class JsonFormatter(logging.Formatter):
    """Format LogRecord as one JSON object per line, redacting secrets."""

    def __init__(self, *, sensitive_keys: Optional[Iterable[str]] = None) -> None:
        super().__init__()
        self.sensitive_keys = {k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT)}

    def format(self, record: LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(_extras(record, self.sensitive_keys))
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def configure_logging(level: str = "INFO", *, stream: Optional[TextIO] = None) -> None:
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    # httpx logs every request URL at INFO, and the URL carries the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)
