"""Structured JSON logging for the quoting kernel.

Every record is one JSON object per line::

    {"ts": "...", "level": "INFO", "logger": "quoting_kernel.modules.reporting.statements",
     "message": "period_report_built", "tenant_id": "t-1", "report_id": "...",
     "quote_count": 12, ...}

Messages are snake_case event names; structured data goes in ``extra``.
Request-scoped fields (tenant, report, quote...) come from ``LogContext``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

_LOGGER_PREFIX = "quoting_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("correlation_id", "tenant_id", "report_id", "quote_id", "actor_id")

_context: ContextVar[dict[str, str]] = ContextVar("quoting_log_context", default={})


def _checked(fields: dict[str, str | None]) -> dict[str, str]:
    unknown = set(fields) - set(_CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
    return {k: v for k, v in fields.items() if v is not None}


class LogContext:
    """Request-scoped log fields, isolated per thread and per asyncio task.

    Fields: correlation_id, tenant_id, report_id, quote_id, actor_id.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set fields for the rest of the current context.  None values are ignored."""
        updates = _checked(fields)
        if updates:
            _context.set({**_context.get(), **updates})

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields inside a ``with`` block and restore the previous ones on exit."""
        token = _context.set({**_context.get(), **_checked(fields)})
        try:
            yield LogContext
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # QuotingError subclasses keep their context as public attributes.
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger under the quoting_kernel namespace (``get_logger("engines")``)."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the quoting_kernel logger.  Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging(); used by the test suite."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
