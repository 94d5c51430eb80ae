"""Window filtering and grouping for expanded occurrences.

The expander passes non-recurring records through untouched; callers that
need every returned record to overlap the visible period apply
``filter_overlapping`` as an explicit, separate step.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, time, tzinfo
from typing import Optional

from .models import TaskRecord
from .recurrence_expander import overlaps_window

logger = logging.getLogger(__name__)


def overlaps(record: TaskRecord, start: datetime, end: datetime) -> bool:
    """True when the record's interval strictly overlaps ``[start, end]``."""
    return overlaps_window(record.start, record.end, start, end)


def filter_overlapping(
    occurrences: Iterable[TaskRecord], start: datetime, end: datetime
) -> list[TaskRecord]:
    """Keep only occurrences overlapping the window, preserving order.

    Zero-length occurrences are kept when they sit strictly inside the window,
    so a task with only a due time is still shown on its day.
    """
    kept = []
    dropped = 0
    for occ in occurrences:
        if overlaps(occ, start, end) or (occ.start == occ.end and start <= occ.start < end):
            kept.append(occ)
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d occurrences outside %s .. %s", dropped, start, end)
    return kept


def sort_occurrences(occurrences: Iterable[TaskRecord]) -> list[TaskRecord]:
    """Stable chronological sort by (start, end)."""
    return sorted(occurrences, key=lambda o: (o.start, o.end))


def group_by_day(
    occurrences: Iterable[TaskRecord],
    days: Iterable[date],
    tz: Optional[tzinfo] = None,
) -> dict[date, list[TaskRecord]]:
    """Map each visible day to the occurrences touching it.

    An occurrence spanning midnight appears under every day it covers.

    Args:
        occurrences: Expanded occurrences
        days: Visible days (e.g. from ``datetime_utils.view_days``)
        tz: Timezone that defines day boundaries; each occurrence's own
            start timezone when omitted
    """
    items = list(occurrences)
    grouped: dict[date, list[TaskRecord]] = {}
    for day in days:
        bucket = []
        for occ in items:
            zone = tz or occ.start.tzinfo
            day_start = datetime.combine(day, time.min, tzinfo=zone)
            day_end = datetime.combine(day, time.max, tzinfo=zone)
            if overlaps(occ, day_start, day_end) or (
                occ.start == occ.end and day_start <= occ.start <= day_end
            ):
                bucket.append(occ)
        grouped[day] = bucket
    return grouped


def group_by_start_date(
    occurrences: Iterable[TaskRecord], tz: Optional[tzinfo] = None
) -> dict[date, list[TaskRecord]]:
    """Agenda grouping: chronological occurrences keyed by their start date.

    Only dates that have occurrences appear, in ascending order.
    """
    grouped: dict[date, list[TaskRecord]] = {}
    for occ in sort_occurrences(occurrences):
        day = occ.start.astimezone(tz).date() if tz is not None else occ.start.date()
        grouped.setdefault(day, []).append(occ)
    return grouped
