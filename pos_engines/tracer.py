"""
pos_engines.tracer -- POS_ENGINE_TRACE records for engine calls.

``@traced_engine`` wraps a pricing engine entrypoint and logs, per call, the
engine name and version, a fingerprint of the keyword inputs that determine
the result, the outcome and the wall-clock duration.

Two calls with equal inputs produce the same fingerprint, so a line whose
figures look wrong on a receipt can be matched to the exact calculation
that produced them:

    @traced_engine("line_item", "1.0", fingerprint_fields=("quantity", "unit_price"))
    def calculate_line(*, quantity, unit_price, ...):
        ...

Canonical forms: Decimals are normalized (``18`` and ``18.00`` agree),
Money is ``"<amount> <currency>"``, dataclasses are fingerprinted field by
field, mapping keys are sorted.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from pos_kernel.domain.values import Money
from pos_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_MESSAGE = "POS_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Decimal):
        return str(value.normalize())
    if isinstance(value, Money):
        return f"{value.amount.normalize()} {value.currency.code}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__name__ + _canonical(fields)
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """
    SHA-256 over ``field=value`` pairs, truncated to 16 hex chars.

    Fields absent from ``kwargs`` count as None.
    """
    canonical = "|".join(
        f"{name}={_canonical(kwargs.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entrypoint so every call logs POS_ENGINE_TRACE at DEBUG.

    When DEBUG is off for the tracer logger the call goes straight through:
    no fingerprint is hashed and no timing is taken.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)

            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if fingerprint_fields else ""
            )
            trace: dict[str, Any] = {
                "trace_type": TRACE_MESSAGE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "function": func.__qualname__,
            }
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace["outcome"] = "error"
                trace["error_type"] = type(e).__name__
                raise
            else:
                trace["outcome"] = "ok"
                return result
            finally:
                trace["duration_ms"] = round((time.perf_counter() - started) * 1000, 3)
                logger.debug(TRACE_MESSAGE, extra=trace)

        return wrapper

    return decorator
