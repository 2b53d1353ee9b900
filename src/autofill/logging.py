from __future__ import annotations

import contextvars
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

_request_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("request_context", default={})


class ORJSONFormatter(logging.Formatter):
    """Structured JSON log formatter using orjson."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - fmt
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        payload.update(_request_context.get({}))
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS:
                continue
            if key.startswith("_"):
                continue
            if key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode()


_RESERVED_RECORD_KEYS = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure root logger with JSON formatter."""

    root = logging.getLogger()
    root.setLevel(log_level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = ORJSONFormatter()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def set_request_context(**kwargs: Any) -> contextvars.Token[dict[str, Any]]:
    """Attach request metadata to subsequent log records."""

    return _request_context.set(dict(kwargs))


def bind_request_context(**kwargs: Any) -> None:
    """Add fields to the current request context; the enclosing reset drops them."""

    _request_context.set({**_request_context.get(), **kwargs})


def reset_request_context(token: contextvars.Token[dict[str, Any]]) -> None:
    _request_context.reset(token)
