"""Calendar arithmetic helpers for recurring-task expansion.

All instants handled by the expander are timezone-aware. Naive input is placed
in a default timezone at the ingestion boundary (``parse_instant``), so the
rest of the package never compares naive and aware datetimes.

Weekday numbering follows the task store convention: 0=Sunday .. 6=Saturday.
Weeks are ISO weeks (Monday first).
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from .exceptions import InvalidTimestamp
from .models import CalendarView

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"

TimezoneLike = Union[str, tzinfo, None]


@lru_cache(maxsize=64)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def resolve_timezone(tz: TimezoneLike) -> tzinfo:
    """Resolve a timezone name (or tzinfo) to a tzinfo instance.

    Args:
        tz: IANA timezone name, tzinfo instance or None (UTC)

    Returns:
        tzinfo instance

    Raises:
        ValueError: If the timezone name is unknown
    """
    if tz is None:
        return UTC
    if isinstance(tz, tzinfo):
        return tz
    if str(tz).strip().upper() in ("UTC", "Z"):
        return UTC
    try:
        return _zone(str(tz))
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz!r}") from e


def parse_instant(
    value: Any,
    field: str = "instant",
    default_timezone: TimezoneLike = None,
    record_id: Optional[str] = None,
) -> datetime:
    """Parse an absolute instant from a datetime, date or ISO-8601 string.

    Handles:
    - ``datetime`` objects (naive ones get the default timezone)
    - ``date`` objects (start of that day)
    - ISO strings: 2025-06-02T09:00:00, 2025-06-02T09:00:00.000Z,
      20250602T090000, 2025-06-02

    Args:
        value: Value to parse
        field: Field name, used in error reports
        default_timezone: Timezone applied to naive values
        record_id: Record the value belongs to, used in error reports

    Returns:
        Timezone-aware datetime

    Raises:
        InvalidTimestamp: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestamp(
                f"Empty {field} timestamp", record_id=record_id, field=field, value=value
            )
        try:
            dt = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            # Non-ISO renderings, e.g. "2025/06/02 09:00" or Date.toUTCString()
            try:
                dt = date_parser.parse(text)
            except (date_parser.ParserError, ValueError, OverflowError) as e:
                raise InvalidTimestamp(
                    f"Unparseable {field} timestamp: {value!r}",
                    record_id=record_id,
                    field=field,
                    value=value,
                ) from e
    else:
        raise InvalidTimestamp(
            f"Unsupported {field} timestamp type: {type(value).__name__}",
            record_id=record_id,
            field=field,
            value=value,
        )

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=resolve_timezone(default_timezone))
    return dt


def start_of_day(dt: datetime) -> datetime:
    """Return midnight of the instant's own calendar day (same tzinfo)."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Return the last representable instant of the instant's calendar day."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999999)


def end_of_year(dt: datetime) -> datetime:
    """Return December 31, end-of-day, of the instant's calendar year."""
    return dt.replace(month=12, day=31, hour=23, minute=59, second=59, microsecond=999999)


def iso_week_start(day: date) -> date:
    """Return the Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def js_weekday(day: date) -> int:
    """Weekday of ``day`` as 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def iso_offset_for_weekday(weekday: int) -> int:
    """Offset from the ISO week start (Monday) for a 0=Sunday weekday."""
    return (weekday - 1) % 7


def calendar_date_in(instant: datetime, tz: Optional[tzinfo]) -> date:
    """Calendar date of ``instant`` as seen in ``tz``."""
    if tz is None or instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(tz).date()


def at_time_of(day: date, anchor: datetime) -> datetime:
    """Place ``day`` at the anchor's wall-clock time-of-day and timezone."""
    return datetime.combine(day, anchor.timetz())


# View period helpers


def week_days(reference: date) -> list[date]:
    """The seven days of the ISO week containing ``reference``."""
    start = iso_week_start(reference)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid_days(reference: date) -> list[date]:
    """Days shown by a month grid: whole ISO weeks covering the month."""
    first = reference.replace(day=1)
    last = first + relativedelta(months=1, days=-1)

    start = iso_week_start(first)
    end = iso_week_start(last) + timedelta(days=6)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def view_days(view: Union[CalendarView, str], reference: date) -> list[date]:
    """Calendar days laid out by ``view`` around ``reference``.

    Month views show whole ISO weeks; day and agenda views show the
    reference day.

    Raises:
        ValueError: If the view name is unknown
    """
    view = CalendarView(view)
    if view == CalendarView.MONTH:
        return month_grid_days(reference)
    if view == CalendarView.WEEK:
        return week_days(reference)
    return [reference]


def view_period(view: Union[CalendarView, str], reference: date) -> tuple[date, date]:
    """First and last day (inclusive) whose tasks a view queries.

    A month view queries the calendar month only, even though its grid
    also lays out the neighbouring days of the first and last week.

    Raises:
        ValueError: If the view name is unknown
    """
    view = CalendarView(view)
    if view == CalendarView.MONTH:
        first = reference.replace(day=1)
        return first, first + relativedelta(months=1, days=-1)
    if view == CalendarView.WEEK:
        days = week_days(reference)
        return days[0], days[-1]
    return reference, reference


def view_window(
    view: Union[CalendarView, str],
    reference: Union[date, datetime],
    tz: TimezoneLike = None,
) -> tuple[datetime, datetime]:
    """Query window for a calendar view.

    Args:
        view: "month", "week", "day" or "agenda"
        reference: Any date inside the period to show
        tz: Timezone for the window bounds; defaults to the reference's
            timezone for aware datetimes, else UTC

    Returns:
        (start, end) where start is midnight of the first day of the period
        and end is end-of-day of its last day
    """
    if isinstance(reference, datetime):
        zone = resolve_timezone(tz if tz is not None else reference.tzinfo)
        ref_day = reference.date() if reference.tzinfo is None else reference.astimezone(zone).date()
    else:
        zone = resolve_timezone(tz)
        ref_day = reference

    first, last = view_period(view, ref_day)
    start = datetime.combine(first, time.min, tzinfo=zone)
    end = datetime.combine(last, time.max, tzinfo=zone)
    logger.debug("View window %s around %s: %s .. %s", view, ref_day, start, end)
    return start, end
