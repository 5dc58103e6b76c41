"""
Calendar helpers.

- DateKey: canonical ``YYYY-MM-DD`` document ids in local wall-clock time
- Timestamp coercion at store/API boundaries (aware -> naive local)
- Month arithmetic with end-of-month clamping, month enumeration
- Fee year boundaries (Aug 13 .. Aug 12 of the following year)
"""
from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator, Tuple, Union

DateLike = Union[date, datetime, str]

KEY_FORMAT = "%Y-%m-%d"
_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

FEE_YEAR_START_MONTH = 8
FEE_YEAR_START_DAY = 13


# ---------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------

def local_now() -> datetime:
    """Naive local wall-clock time; every datetime in the core is naive local."""
    return datetime.now()


def to_local_datetime(value: Union[DateLike, int, float]) -> datetime:
    """
    Coerce a timestamp-ish value into a naive local datetime.

    Accepts datetimes (tz-aware ones are shifted into the local zone), dates
    (midnight), ISO-8601 strings (a trailing ``Z`` is honoured) and epoch
    seconds. Raises ValueError when the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, bool):
        raise ValueError(f"Invalid date: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Invalid date: empty string")
        if _KEY_RE.match(raw):
            # calendar-only input is pinned to noon so DST shifts never move the day
            return datetime.combine(parse_key(raw), time(12, 0))
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
        return to_local_datetime(parsed)
    raise ValueError(f"Invalid date: {value!r}")


def to_local_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return to_local_datetime(value).date()
    if isinstance(value, date):
        return value
    return to_local_datetime(value).date()


# ---------------------------------------------------------------------
# DateKey
# ---------------------------------------------------------------------

def to_key(value: DateLike) -> str:
    """Canonical ``YYYY-MM-DD`` key for the local calendar day of ``value``."""
    return to_local_date(value).strftime(KEY_FORMAT)


def parse_key(key: str) -> date:
    """Inverse of :func:`to_key`; only the canonical form is accepted."""
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise ValueError(f"Invalid date key: {key!r}")
    return datetime.strptime(key, KEY_FORMAT).date()


def is_key(value: object) -> bool:
    if not isinstance(value, str) or not _KEY_RE.match(value):
        return False
    try:
        parse_key(value)
    except ValueError:
        return False
    return True


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping to the last day (Jan 31 + 1 -> Feb 28/29)."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def same_day(a: DateLike, b: DateLike) -> bool:
    return to_local_date(a) == to_local_date(b)


# ---------------------------------------------------------------------
# Months
# ---------------------------------------------------------------------

def month_start(value: DateLike) -> date:
    return to_local_date(value).replace(day=1)


def month_end(value: DateLike) -> date:
    d = to_local_date(value)
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def month_bounds(value: DateLike) -> Tuple[datetime, datetime]:
    """First instant and last instant (23:59:59.999999) of the month containing ``value``."""
    return day_bounds(month_start(value), month_end(value))


def day_bounds(start: DateLike, end: DateLike) -> Tuple[datetime, datetime]:
    """Inclusive datetime range covering whole local days ``start`` .. ``end``."""
    return (
        datetime.combine(to_local_date(start), time.min),
        datetime.combine(to_local_date(end), time.max),
    )


def iter_month_days(value: DateLike) -> Iterator[date]:
    current = month_start(value)
    last = month_end(value)
    while current <= last:
        yield current
        current = add_days(current, 1)


def iter_months(start: DateLike, end: DateLike) -> Iterator[date]:
    """First day of each month from the month of ``start`` while it is <= ``end``."""
    current = month_start(start)
    last = to_local_date(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def month_name(value: DateLike) -> str:
    return MONTH_NAMES[to_local_date(value).month - 1]


def month_display_name(value: DateLike) -> str:
    d = to_local_date(value)
    return f"{MONTH_NAMES[d.month - 1]} {d.year}"


def calendar_year_range(today: date | None = None) -> Tuple[date, date]:
    today = today or local_now().date()
    return date(today.year, 1, 1), date(today.year, 12, 31)


# ---------------------------------------------------------------------
# Fee year
# ---------------------------------------------------------------------

def fee_year_start(today: date | None = None) -> date:
    today = today or local_now().date()
    if (today.month, today.day) < (FEE_YEAR_START_MONTH, FEE_YEAR_START_DAY):
        return date(today.year - 1, FEE_YEAR_START_MONTH, FEE_YEAR_START_DAY)
    return date(today.year, FEE_YEAR_START_MONTH, FEE_YEAR_START_DAY)


def fee_year_range(today: date | None = None) -> Tuple[date, date]:
    start = fee_year_start(today)
    return start, date(start.year + 1, FEE_YEAR_START_MONTH, FEE_YEAR_START_DAY - 1)


def is_within_fee_year(value: DateLike, today: date | None = None) -> bool:
    start, end = fee_year_range(today)
    return start <= to_local_date(value) <= end


def fee_year_label(today: date | None = None) -> str:
    start = fee_year_start(today)
    return f"{MONTH_NAMES[FEE_YEAR_START_MONTH - 1]} {start.year} - Current"


def inclusive_range(start: DateLike, end: DateLike) -> Tuple[datetime, datetime]:
    """
    Datetime bounds for a caller-supplied range. Calendar-only inputs (dates
    or DateKeys) cover the whole day; explicit datetimes are used as given.
    Raises ValueError when either side cannot be parsed.
    """
    def _is_calendar_only(value: DateLike) -> bool:
        return (isinstance(value, date) and not isinstance(value, datetime)) or is_key(value)

    lo = datetime.combine(to_local_date(start), time.min) if _is_calendar_only(start) else to_local_datetime(start)
    hi = datetime.combine(to_local_date(end), time.max) if _is_calendar_only(end) else to_local_datetime(end)
    return lo, hi
