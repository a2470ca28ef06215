"""
slot_utils.py
-------------
Time-interval helpers shared by the slot generator, the booking manager and
attendance:

- overlaps(): half-open overlap test, used at booking commit time.
- is_within_interval(): closed containment test, used by the slot generator.
  A candidate that starts or ends exactly on an existing boundary counts as
  inside it.
- subtract_interval(): what is left of [start, end) after cutting a piece out.
- minutes_between(): whole minutes between two datetimes, truncated toward zero.
- UTC day helpers and ISO parsing for request parameters.

All datetimes handled here are timezone-aware UTC.
"""

from datetime import datetime, date, time, timedelta, timezone as dt_timezone

from django.utils.dateparse import parse_date, parse_datetime

from ..exceptions import ValidationFailed

MINUTES_PER_DAY = 24 * 60


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """True iff [a_start, a_end) and [b_start, b_end) share time. Touching ends do not."""
    return a_start < b_end and b_start < a_end


def is_within_interval(point, start, end) -> bool:
    """Closed containment: start <= point <= end."""
    return start <= point <= end


def subtract_interval(start, end, cut_start, cut_end):
    """
    Remove [cut_start, cut_end) from [start, end).
    Returns a list of 0, 1 or 2 (start, end) tuples in chronological order.
    """
    if not overlaps(start, end, cut_start, cut_end):
        return [(start, end)]
    pieces = []
    if start < cut_start:
        pieces.append((start, cut_start))
    if cut_end < end:
        pieces.append((cut_end, end))
    return pieces


def minutes_between(later, earlier) -> int:
    """Whole minutes from `earlier` to `later`, truncated toward zero."""
    return int((later - earlier).total_seconds() / 60)


def day_start_utc(dt: datetime) -> datetime:
    """Midnight UTC of the UTC day that contains `dt`."""
    dt = dt.astimezone(dt_timezone.utc)
    return datetime(dt.year, dt.month, dt.day, tzinfo=dt_timezone.utc)


def at_minute(day: datetime, minute_of_day: int) -> datetime:
    """UTC midnight of `day` plus `minute_of_day` minutes."""
    return day_start_utc(day) + timedelta(minutes=minute_of_day)


def iso_weekday_utc(dt: datetime) -> int:
    """1 = Monday .. 7 = Sunday, evaluated on the UTC calendar."""
    return dt.astimezone(dt_timezone.utc).isoweekday()


def parse_iso_datetime(value, field: str = "value") -> datetime:
    """
    Parse an ISO-8601 date ('2025-01-06') or date-time ('2025-01-06T09:00:00Z').

    - A bare date means midnight UTC of that day.
    - Naive date-times are taken as UTC.
    - Already-parsed datetime/date objects are accepted as-is.

    Raises:
        ValidationFailed: if the value is missing or unparseable.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    else:
        raw = (value or "").strip()
        if not raw:
            raise ValidationFailed(f"'{field}' is required.")
        try:
            dt = parse_datetime(raw)
            if dt is None:
                d = parse_date(raw)
                dt = datetime.combine(d, time.min) if d else None
        except ValueError:
            dt = None
        if dt is None:
            raise ValidationFailed(f"'{field}' must be an ISO-8601 date or date-time.")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)
