"""
payroll_engines.tracer -- PAYROLL_ENGINE_TRACE emission for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine function or method and logs one
    PAYROLL_ENGINE_TRACE record per call with the engine name and version,
    a fingerprint of the selected inputs, the checksum of the statutory
    constants the call ran under, and the duration.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log
    record only; arguments are read, never modified.

Invariants enforced:
    - Fingerprints are deterministic: dataclasses are rendered field by
      field, Decimals by their exact text, mappings with sorted keys.  The
      digest is SHA-256 truncated to 16 hex characters.
    - A parameter listed in ``fingerprint_fields`` that was not supplied
      (and has no default) is rendered as ``null``.

Audit relevance:
    Two calls with the same fingerprint and the same constants checksum
    produce identical results, so a disputed figure can be replayed from
    the trace alone.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("payroll_kernel.engines.tracer")

FINGERPRINT_LENGTH = 16
TRACE_TYPE = "PAYROLL_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (bool, int, float, str)):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        pairs = [(f.name, getattr(value, f.name)) for f in fields(value)]
    elif isinstance(value, Mapping):
        pairs = sorted(value.items(), key=lambda item: str(item[0]))
    elif isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    else:
        return str(value)
    return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in pairs) + "}"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Short SHA-256 digest of the named arguments, in the order given."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entry point so each call is traced.

    Args:
        engine_name: Engine identifier, e.g. ``"earnings"``.
        engine_version: Version of the engine's formulas, e.g. ``"1.0"``.
        fingerprint_fields: Parameter names hashed into the input
            fingerprint.  The ``constants`` argument, when present, is
            reported by checksum instead.

    Exceptions raised by the engine propagate untouched and no trace is
    written for the failed call.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = signature.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            arguments = bound.arguments
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, arguments)
                if fingerprint_fields
                else ""
            )
            constants = arguments.get("constants")

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "constants_checksum": getattr(constants, "checksum", None),
                "duration_ms": duration_ms,
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
