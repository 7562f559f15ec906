"""
Payment day calculation from partial move-in dates.

Operators give the move-in date as day and month only. The date is anchored
to local midnight in a reference timezone before the payment day is read, so
the stored day never shifts with the server's own timezone.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple, Union

import pytz

from rent_reminder.core.exceptions import InvalidDateError, ValidationError

DAY_MONTH_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})$")

TimezoneLike = Union[str, pytz.BaseTzInfo]


@dataclass(frozen=True)
class PaymentDayResult:
    """Resolved move-in date and the payment day derived from it."""
    move_in_date: date
    payment_day: int


def _as_timezone(tz: TimezoneLike) -> pytz.BaseTzInfo:
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def parse_day_month(text: str) -> Tuple[int, int]:
    """
    Split a ``DD/MM`` string into integers.

    Only the shape is checked here; calendar validity is left to
    :func:`resolve_move_in_date`.

    Raises:
        ValidationError: If the text is not one or two digits, a slash, and
            one or two digits
    """
    match = DAY_MONTH_PATTERN.match(text.strip()) if text else None
    if not match:
        raise ValidationError("expected DD/MM", field="move_in_date", value=text)
    return int(match.group(1)), int(match.group(2))


def resolve_move_in_date(
    day: int,
    month: int,
    timezone: TimezoneLike,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> date:
    """
    Build the move-in date at local midnight in ``timezone``.

    Args:
        day: Day of month
        month: Month number
        timezone: Reference timezone name or pytz zone
        year: Fixed year; defaults to the current year in ``timezone``
        now: Current instant, for callers that need a stable clock

    Raises:
        InvalidDateError: If the values do not form a calendar date
    """
    tz = _as_timezone(timezone)
    if year is None:
        current = now.astimezone(tz) if now is not None else datetime.now(tz)
        year = current.year

    try:
        local_midnight = tz.localize(datetime(year, month, day))
    except (ValueError, OverflowError):
        raise InvalidDateError(day, month, year)

    return local_midnight.date()


def compute_payment_day(
    day: int,
    month: int,
    timezone: TimezoneLike,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> PaymentDayResult:
    """Resolve the move-in date and take its day of month as the payment day."""
    move_in_date = resolve_move_in_date(day, month, timezone, year=year, now=now)
    return PaymentDayResult(move_in_date=move_in_date, payment_day=move_in_date.day)


def format_spanish_date(value: date) -> str:
    """Long Spanish date, e.g. ``15 de marzo de 2026``."""
    return f"{value.day} de {SPANISH_MONTHS[value.month - 1]} de {value.year}"


SPANISH_MONTHS = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)
