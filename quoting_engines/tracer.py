"""
quoting_engines.tracer -- QUOTING_ENGINE_TRACE records for engine entry points.

``@traced_engine(name, version, fingerprint_fields)`` wraps a pure engine
function and logs one record per call: engine name and version, a
fingerprint of the selected keyword inputs, duration, and whether the call
raised.  Two calls with equal inputs share a fingerprint, so a report run
can be matched against an earlier one from logs alone.

Fingerprints are the first 16 hex chars of a SHA-256 over a canonical text
form of the inputs.  Quotes, snapshots and other frozen dataclasses are
canonicalized field by field; Decimals keep their exact text; unordered
collections are sorted first.  Fields not passed as keywords count as null.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import time
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from quoting_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_MESSAGE = "QUOTING_ENGINE_TRACE"


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, int, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        inner = ",".join(
            f"{f.name}:{_canonical(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({inner})"
    if isinstance(value, dict):
        items = sorted((str(k), _canonical(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in items) + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonical(v) for v in value)) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """Deterministic 16-hex-char fingerprint of the named keyword inputs."""
    canonical = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entry point so each call emits QUOTING_ENGINE_TRACE.

    Exceptions propagate unchanged; the trace of a failed call carries
    ``outcome="error"`` and the exception type.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            trace: dict[str, Any] = {
                "trace_type": TRACE_MESSAGE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "function": func.__qualname__,
                "input_fingerprint": (
                    compute_input_fingerprint(fingerprint_fields, kwargs)
                    if fingerprint_fields
                    else ""
                ),
            }
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                trace.update(outcome="error", error_type=type(exc).__name__)
                raise
            else:
                trace["outcome"] = "ok"
                return result
            finally:
                trace["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
                logger.info(TRACE_MESSAGE, extra=trace)

        return wrapper

    return decorator
