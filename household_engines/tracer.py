"""
household_engines.tracer -- LEDGER_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine method and, once it returns,
    logs which engine ran, at which version, over which inputs (as a
    short fingerprint) and for how long.

Architecture position:
    Engines -- support code for the calculation layer.  Emits one DEBUG
    record under ``household_kernel.engines.tracer`` and nothing else.

Invariants enforced:
    - The fingerprint depends only on the selected keyword arguments:
      mappings are keyed in sorted order, enums by value, sequences in
      order.  Two calls with equal inputs always share a fingerprint.
    - A call that raises emits no trace; the exception propagates as is.

Usage:
    @traced_engine("allocation", "1.0", fingerprint_fields=("amount", "policy"))
    def allocate(self, *, amount, policy, members):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import json
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from household_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "LEDGER_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _plain(value: Any) -> Any:
    """Reduce engine inputs to JSON-stable primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if value is None or isinstance(value, (bool, int, str)):
        return value
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """Short SHA-256 over the named keyword arguments; absent ones count as null."""
    selected = {field: _plain(kwargs.get(field)) for field in fingerprint_fields}
    canonical = json.dumps(selected, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entrypoint so each successful call is traced."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.debug(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": (
                    compute_input_fingerprint(fingerprint_fields, kwargs)
                    if fingerprint_fields else ""
                ),
                "duration_ms": round(elapsed_ms, 3),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
