"""Structured logging helpers emitting JSON Lines payloads."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "JsonLogFormatter",
    "configure_json_logger",
    "log_event",
]


class JsonLogFormatter(logging.Formatter):
    """Format log records as single-line JSON payloads."""

    def format(self, record: logging.LogRecord) -> str:
        payload: MutableMapping[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        event = getattr(record, "event", None)
        if event:
            payload["event"] = event

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, Mapping):
            payload.update(extra_fields)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_json_logger(log_path: Path | None, level: int = logging.INFO) -> logging.Logger:
    """Attach a JSON Lines handler to the ``loggrok`` logger (stderr when no path)."""

    logger = logging.getLogger("loggrok")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(JsonLogFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    message: str | None = None,
    **fields: Any,
) -> None:
    """Emit a structured event; ``fields`` travel on the record as ``extra_fields``."""

    logger.log(level, message or event, extra={"event": event, "extra_fields": fields})
