"""
Amounts -- Decimal helpers shared by every payroll calculation.

Responsibility:
    Converts caller-supplied numbers to ``Decimal`` and formalises the two
    rounding/flooring rules the statutory formulas rely on: the
    "no negative base" floor and whole-peso half-up rounding.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary arithmetic is ``Decimal``; floats are converted through
      ``str`` so binary artefacts never enter a calculation.
    - ``non_negative`` is the single clamp used at every documented floor
      point; the final liquidation net amount is the only figure allowed to
      go below zero and never passes through it.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Any, *, field_name: str = "amount") -> Decimal:
    """
    Convert a caller-supplied number to ``Decimal``.

    ``None`` and empty strings are read as zero, matching the convention
    that optional numeric fields on a form are "present with default 0".

    Raises:
        ValueError: If the value cannot be interpreted as a number.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got bool")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{field_name} is not a valid amount: {value!r}") from e


def non_negative(value: Decimal) -> Decimal:
    """Floor an intermediate amount at zero (``max(0, value)``)."""
    return value if value > ZERO else ZERO


def round_to_unit(value: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero."""
    return value.quantize(ONE, rounding=ROUND_HALF_UP)
