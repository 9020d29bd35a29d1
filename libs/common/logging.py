"""Logging setup shared by the marketplace API, the admin console and scripts.

Records carry the current request's id, method, path and caller (user id)
from contextvars bound by ``libs.common.middleware``.
"""
import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional

from libs.common.config import get_settings

_CONTEXT_KEYS = ("request_id", "method", "path", "user_id")
_context: ContextVar[dict[str, Optional[str]]] = ContextVar("request_context", default={})

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "aiosqlite", "sqlalchemy.engine")


def set_request_context(
    request_id: Optional[str] = None,
    path: Optional[str] = None,
    method: Optional[str] = None,
    user_id: Optional[str] = None,
) -> str:
    """Bind request metadata to the current context and return the request id."""
    request_id = request_id or uuid.uuid4().hex
    _context.set(
        {"request_id": request_id, "method": method, "path": path, "user_id": user_id}
    )
    return request_id


def get_request_id() -> Optional[str]:
    return _context.get().get("request_id")


def clear_request_context() -> None:
    _context.set({})


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _context.get()
        for key in _CONTEXT_KEYS:
            setattr(record, key, ctx.get(key))
        if record.request_id is None:
            record.request_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra={"extra_fields": {...}}`` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value and value != "-":
                payload[key] = value
        payload.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    if settings.ENVIRONMENT in ("local", "test"):
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s"
            )
        )
    else:
        handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
