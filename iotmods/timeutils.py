"""Calendar helpers working on Unix timestamps.

Broken-down times are taken in UTC. Callers that want local time add their
zone offset to the timestamp first.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SECONDS_PER_DAY = 24 * 60 * 60

# day<any char>month<any char>year  hour:minute:second
_DATETIME_RE = re.compile(
    r"\s*([+-]?\d+)(?!\d)(?s:.)"
    r"\s*([+-]?\d+)(?!\d)(?s:.)"
    r"\s*([+-]?\d+)(?!\d)"
    r"\s*([+-]?\d+)(?!\d):"
    r"\s*([+-]?\d+)(?!\d):"
    r"\s*([+-]?\d+)"
)


def _to_datetime(unix_time: int) -> datetime:
    return _EPOCH + timedelta(seconds=int(unix_time))


def unix_from_ymdhms(
    year: int, month: int, day: int, hour: int, minute: int, second: int
) -> int:
    """Return the timestamp of a calendar time, normalising out-of-range fields."""
    year_shift, month_index = divmod(int(month) - 1, 12)
    first = date(int(year) + year_shift, month_index + 1, 1)
    days = (first - _EPOCH.date()).days + int(day) - 1
    return (
        days * _SECONDS_PER_DAY
        + int(hour) * 3600
        + int(minute) * 60
        + int(second)
    )


def unix_from_string(text: str) -> int:
    """Parse ``DD.MM.YY hh:mm:ss`` (any single-character date separators).

    Two-digit years below 69 fall in the 2000s, the rest in the 1900s.
    A first field above 31 is taken as the year and swapped with the last.
    Raises ValueError when the text does not hold all six fields.
    """
    match = _DATETIME_RE.match(text or "")
    if match is None:
        raise ValueError(f"cannot parse date and time: {text!r}")
    day, month, year, hour, minute, second = (int(g) for g in match.groups())
    if year < 100:
        year += 1900 if year >= 69 else 2000
    if day > 31:
        day, year = year, day
    return unix_from_ymdhms(year, month, day, hour, minute, second)


def format_unix_time(unix_time: int) -> str:
    """Format a timestamp as ``DD.MM.YY hh:mm:ss``."""
    moment = _to_datetime(unix_time)
    return (
        f"{moment.day:02d}.{moment.month:02d}.{moment.year % 100:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


def _last_sunday(year: int, month: int) -> date:
    last = date(year, month, calendar.monthrange(year, month)[1])
    return last - timedelta(days=(last.weekday() + 1) % 7)


def is_dst(utc: int) -> bool:
    """Return True if *utc* lies in European summer time.

    Summer time runs from 03:00 on the last Sunday of March to 04:00 on the
    last Sunday of October.
    """
    year = _to_datetime(utc).year
    start_day = _last_sunday(year, 3)
    end_day = _last_sunday(year, 10)
    start = unix_from_ymdhms(year, 3, start_day.day, 3, 0, 0)
    end = unix_from_ymdhms(year, 10, end_day.day, 4, 0, 0)
    return start <= utc < end


def week_of_year(unix_time: int) -> int:
    """Return the week number with Monday as the first day (``%W``)."""
    return int(_to_datetime(unix_time).strftime("%W"))


def day_of_week_number(unix_time: int) -> int:
    """Return the weekday as 1 (Monday) to 7 (Sunday)."""
    return _to_datetime(unix_time).isoweekday()


def days_in_month(unix_time: int) -> int:
    """Return the number of days in the month holding *unix_time*."""
    moment = _to_datetime(unix_time)
    return calendar.monthrange(moment.year, moment.month)[1]


def orthodox_easter(year: int) -> date:
    """Return the Gregorian date of Orthodox Easter.

    Uses the Meeus Julian algorithm with a fixed 13-day calendar difference,
    which holds for the years 1900 to 2099.
    """
    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7
    julian_month = (d + e + 114) // 31
    julian_day = (d + e + 114) % 31 + 1
    return date(year, julian_month, 1) + timedelta(days=julian_day + 13 - 1)