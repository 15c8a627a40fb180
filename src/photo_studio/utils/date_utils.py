"""Date parsing and reporting-period utilities."""

import calendar
import re
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple, Union

from ..core.exceptions import ValidationError

MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})$')
YEAR_PATTERN = re.compile(r'^(\d{4})$')
COMPACT_OFFSET = re.compile(r'([+-]\d{2})(\d{2})$')

END_OF_DAY = time(23, 59, 59)
MIN_YEAR = 1


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the database stores naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Drop timezone information after converting to UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse ISO-8601 strings (a trailing ``Z`` is accepted) into naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    elif 'T' in text:
        text = COMPACT_OFFSET.sub(r'\1:\2', text)
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def parse_month(month: str) -> Tuple[int, int]:
    """Parse ``YYYY-MM`` into ``(year, month)``."""
    match = MONTH_PATTERN.match(month.strip())
    if not match:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM")
    year, month_num = int(match.group(1)), int(match.group(2))
    if not 1 <= month_num <= 12 or year < MIN_YEAR:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM")
    return year, month_num


def parse_year(year: str) -> int:
    match = YEAR_PATTERN.match(year.strip())
    if not match:
        raise ValidationError(f"Invalid year '{year}', expected YYYY")
    value = int(match.group(1))
    if value < MIN_YEAR:
        raise ValidationError(f"Invalid year '{year}', expected YYYY")
    return value


def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and last second (23:59:59) of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime(year, month, 1),
        datetime.combine(date(year, month, last_day), END_OF_DAY),
    )


def year_range(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime.combine(date(year, 12, 31), END_OF_DAY)


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def period_range(
    month: Optional[str] = None,
    year: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[datetime, datetime, str]:
    """Resolve a reporting period from ``month``/``year`` query parameters.

    ``month`` wins over ``year``; with neither, the current month is used.
    Returns ``(start, end, label)`` with an inclusive end bound.
    """
    if month:
        start, end = month_range(*parse_month(month))
        return start, end, month
    if year:
        start, end = year_range(parse_year(year))
        return start, end, year

    today = today or utcnow().date()
    start, end = month_range(today.year, today.month)
    return start, end, "Current Month"


def previous_period(start: datetime, yearly: bool) -> Tuple[datetime, datetime]:
    """The period immediately before the one starting at ``start``."""
    if start.year == MIN_YEAR and (yearly or start.month == 1):
        raise ValidationError(f"No reporting period before {start:%Y-%m}")
    if yearly:
        return year_range(start.year - 1)
    return month_range(*previous_month(start.year, start.month))
