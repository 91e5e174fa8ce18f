"""Date parsing and formatting shared by the calendar and reminder tools.

The model passes dates as loosely formatted strings ("tomorrow",
"next friday", "2026-03-14", "2026-03-14T15:00:00-04:00"). Everything is
interpreted in the owner's timezone from settings.
"""

from __future__ import annotations

import zoneinfo
from datetime import date, datetime, time, timedelta

from wren.config import settings

_WEEKDAYS = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%b %d, %Y", "%B %d, %Y")

_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%b %d, %Y at %I:%M %p",
    "%B %d, %Y at %I:%M %p",
)

REMINDER_DEFAULT_TIME = time(9, 0)


def local_tz() -> zoneinfo.ZoneInfo:
    return zoneinfo.ZoneInfo(settings.timezone)


def today() -> date:
    return datetime.now(local_tz()).date()


def _sunday_index(day: date) -> int:
    # date.weekday() counts from Monday; weeks here start on Sunday.
    return (day.weekday() + 1) % 7


def _next_weekday(target: int, base: date) -> date:
    """The next *target* day strictly after *base*."""
    days = target - _sunday_index(base)
    if days <= 0:
        days += 7
    return base + timedelta(days=days)


def _this_weekday(target: int, base: date) -> date:
    """The *target* day in the Sunday-based week containing *base*, even if past."""
    return base + timedelta(days=target - _sunday_index(base))


def parse_date(text: str, *, base: date | None = None) -> date | None:
    """Parse a relative or absolute calendar date. Returns None if unrecognized.

    Understands today/tomorrow/yesterday, bare weekday names and
    "next <weekday>" (next occurrence after today), "this <weekday>"
    (this week's, possibly past), "next week" and a handful of absolute
    formats.
    """
    base = base or today()
    lower = text.strip().lower()

    relative = {"today": 0, "tomorrow": 1, "yesterday": -1, "next week": 7}
    if lower in relative:
        return base + timedelta(days=relative[lower])

    if lower in _WEEKDAYS:
        return _next_weekday(_WEEKDAYS[lower], base)

    prefix, _, rest = lower.partition(" ")
    if rest in _WEEKDAYS:
        if prefix == "next":
            return _next_weekday(_WEEKDAYS[rest], base)
        if prefix == "this":
            return _this_weekday(_WEEKDAYS[rest], base)

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(text: str, *, tz: zoneinfo.ZoneInfo | None = None) -> datetime | None:
    """Parse a date-time string into an aware datetime.

    Values without an offset are taken to be in *tz* (the owner's timezone
    by default). Date-only strings are not accepted here; see
    :func:`parse_reminder_due`.
    """
    tz = tz or local_tz()
    value = text.strip()

    parsed: datetime | None = None
    if "T" in value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            parsed = None

    if parsed is None:
        for fmt in _DATETIME_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_reminder_due(text: str, *, base: date | None = None) -> datetime | None:
    """Parse a reminder due date. Date-only values default to 09:00 local."""
    parsed = parse_datetime(text)
    if parsed is not None:
        return parsed
    day = parse_date(text, base=base)
    if day is None:
        return None
    return datetime.combine(day, REMINDER_DEFAULT_TIME, tzinfo=local_tz())


def day_range(start: date, end: date | None = None) -> tuple[datetime, datetime]:
    """Local start-of-day of *start* through 23:59:59 of *end* (or *start*)."""
    tz = local_tz()
    last = end or start
    return (
        datetime.combine(start, time.min, tzinfo=tz),
        datetime.combine(last, time(23, 59, 59), tzinfo=tz),
    )


def format_datetime(value: datetime) -> str:
    """e.g. "Mar 14, 2026 at 3:00 PM", in the owner's timezone."""
    if value.tzinfo is not None:
        value = value.astimezone(local_tz())
    return f"{value:%b} {value.day}, {value:%Y} at {format_time(value)}"


def format_time(value: datetime) -> str:
    """e.g. "3:00 PM"."""
    if value.tzinfo is not None:
        value = value.astimezone(local_tz())
    hour = value.hour % 12 or 12
    return f"{hour}:{value:%M %p}"


def format_weekday(value: datetime) -> str:
    """e.g. "Saturday, Mar 14 at 3:00 PM"."""
    if value.tzinfo is not None:
        value = value.astimezone(local_tz())
    return f"{value:%A, %b} {value.day} at {format_time(value)}"
