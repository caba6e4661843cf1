"""Structured logging configuration for prompt2sql."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Attributes the request client attaches through ``extra=``.
CONTEXT_FIELDS = ("provider", "endpoint", "status_code")


class JsonFormatter(logging.Formatter):
    """Format records as single-line JSON objects.

    Provider context passed via ``extra`` (see ``CONTEXT_FIELDS``) is copied
    into the payload when present; nothing else from the record is.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if isinstance(resolved, int):
        return resolved
    msg = f"Unsupported log level: {level}"
    raise ValueError(msg)


def redact_secret(secret: str, visible: int = 6) -> str:
    """Return a short prefix of ``secret`` suitable for log output."""
    if len(secret) <= visible:
        return "***"
    return secret[:visible] + "..."


def configure_logging(
    *,
    log_level: str | int = "WARNING",
    log_file: str | Path | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure root logger with JSON console/file handlers.

    Console output goes to stderr so it never mixes with generated SQL on stdout.
    """

    level = _resolve_level(log_level)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    # httpx logs every request at INFO; the request client already does.
    logging.getLogger("httpx").setLevel(level if level <= logging.DEBUG else logging.WARNING)

    formatter = JsonFormatter()

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
