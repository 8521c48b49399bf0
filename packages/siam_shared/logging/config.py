"""Root logging configuration for SIAM processes.

Logs always go to stdout. A size-rotated JSON file can be added next to it
for hosts that collect logs from disk. Both outputs carry the bound context
fields and any ``extra=`` fields passed at the call site.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

from . import fields
from .context import bind_context, get_context

_BYTES_PER_MB = 1024 * 1024

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "context",
    "taskName",
}


@dataclass(frozen=True, slots=True)
class FileOutput:
    """Rotating log file target, written as ``<directory>/<name>.log``."""

    directory: str = "log"
    name: str = "siam"
    max_size_mb: int = 10
    max_backups: int = 5

    @property
    def path(self) -> Path:
        return Path(self.directory) / f"{self.name}.log"


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return bound context merged with the record's ``extra=`` fields."""
    merged: dict[str, Any] = dict(getattr(record, "context", None) or {})
    for key, value in vars(record).items():
        if key not in _RECORD_ATTRS and not key.startswith("_"):
            merged[key] = value
    return merged


class ContextFilter(logging.Filter):
    """Attach the current logging context to each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: core fields first, then context and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        for key, value in record_fields(record).items():
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """``timestamp level logger message key=value ...`` lines for terminals."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra = record_fields(record)
        if not extra:
            return message
        return message + " " + " ".join(f"{key}={value}" for key, value in sorted(extra.items()))


def _file_handler(output: FileOutput, level: str) -> logging.Handler:
    Path(output.directory).mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        output.path,
        maxBytes=output.max_size_mb * _BYTES_PER_MB,
        backupCount=output.max_backups,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter())
    return handler


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
    file: FileOutput | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging with a console handler and optional log file.

    The console handler writes to ``stream``, stdout by default. Existing root
    handlers are replaced, so calling this more than once never duplicates
    output. Replaced file handlers are closed.
    """
    level = level.upper()
    root = logging.getLogger()
    for existing in root.handlers:
        if isinstance(existing, logging.FileHandler):
            existing.close()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler(stream=sys.stdout if stream is None else stream)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    root.addHandler(handler)

    if file is not None:
        root.addHandler(_file_handler(file, level))

    seed_context: dict[str, object] = {fields.PID: os.getpid()}
    if service:
        seed_context[fields.SERVICE] = service
    if environment:
        seed_context[fields.ENVIRONMENT] = environment
    bind_context(**seed_context)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the stdlib logger for ``name``; modules pass ``__name__``."""
    return logging.getLogger(name)
