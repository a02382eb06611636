"""
Commercial 30/360 day count.

Every month counts as 30 days and every year as 360.  A day-of-month of
31 is treated as 30 on both ends, and the count is inclusive of both the
start and end dates, so a period that starts and ends on the same day is
one day long.

Pure function, no I/O.  Inputs the upstream forms could not guarantee
(missing or unparseable dates) fall back to one standard month instead
of raising.
"""

from __future__ import annotations

from datetime import date, datetime

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.calendar")

DEFAULT_PERIOD_DAYS = 30


def parse_period_date(value: date | datetime | str | None) -> date | None:
    """
    Interpret a period boundary.

    Accepts ``date``, ``datetime`` (date part only), ISO ``YYYY-MM-DD``
    strings (a trailing time component is ignored) or ``None``.  Returns
    ``None`` for anything that cannot be read as a calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def days_between_360(
    start: date | datetime | str | None,
    end: date | datetime | str | None,
) -> int:
    """
    Days between two dates under the 30/360 convention, both ends included.

    ``(ey - sy) * 360 + (em - sm) * 30 + (ed - sd) + 1`` with day 31
    clamped to 30, floored at 0.  Returns ``DEFAULT_PERIOD_DAYS`` when
    either date is missing or malformed.

    Examples:
        2025-01-01 -> 2025-01-30  = 30
        2025-01-01 -> 2025-06-30  = 180
        2025-03-15 -> 2025-03-15  = 1
    """
    start_date = parse_period_date(start)
    end_date = parse_period_date(end)
    if start_date is None or end_date is None:
        logger.debug(
            "period_dates_defaulted",
            extra={
                "start": str(start) if start is not None else None,
                "end": str(end) if end is not None else None,
                "days": DEFAULT_PERIOD_DAYS,
            },
        )
        return DEFAULT_PERIOD_DAYS

    start_day = min(start_date.day, 30)
    end_day = min(end_date.day, 30)

    days = (
        (end_date.year - start_date.year) * 360
        + (end_date.month - start_date.month) * 30
        + (end_day - start_day)
        + 1
    )
    return max(0, days)
