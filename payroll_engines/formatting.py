"""
Presentation helper for rendering snapshot amounts.

Colombian peso style: peso sign, a non-breaking space, ``.`` as the
thousands separator, no decimals.  Halves round away from zero.

    format_currency(1423500)    -> "$ 1.423.500"
    format_currency(-1000)      -> "-$ 1.000"

Stateless and not part of the arithmetic: snapshots always hold exact
Decimals; only rendered text is rounded.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_kernel.domain.amounts import round_to_unit, to_decimal

CURRENCY_SYMBOL = "$"
THOUSANDS_SEPARATOR = "."
NBSP = "\u00a0"


def format_currency(amount: Decimal | int | float | str) -> str:
    """Format an amount as whole Colombian pesos."""
    value = round_to_unit(to_decimal(amount))
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.0f}".replace(",", THOUSANDS_SEPARATOR)
    return f"{sign}{CURRENCY_SYMBOL}{NBSP}{digits}"
