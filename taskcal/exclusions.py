"""Per-occurrence deletion ("delete this occurrence only").

The store records a deleted occurrence by appending the start of its calendar
day to the series' ``excludeDates``; the expander then suppresses that day on
the next call. These helpers build the updated record without touching the
original.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .datetime_utils import parse_instant, start_of_day
from .models import TaskRecord

logger = logging.getLogger(__name__)


def exclusion_for(record: TaskRecord, occurrence_start: datetime | str) -> datetime:
    """Start-of-day, in the anchor's timezone, of the occurrence's date."""
    tz = record.start.tzinfo
    instant = parse_instant(
        occurrence_start, field="occurrenceStart", default_timezone=tz, record_id=record.id
    )
    return start_of_day(instant.astimezone(tz))


def exclude_occurrence(record: TaskRecord, occurrence_start: datetime | str) -> TaskRecord:
    """Return a copy of ``record`` with the occurrence's day excluded.

    Excluding a day that is already excluded returns an equal copy.
    """
    day = exclusion_for(record, occurrence_start)
    tz = record.start.tzinfo
    existing = {ex.astimezone(tz).date() for ex in record.exclude_dates}
    if day.date() in existing:
        logger.debug("Day %s already excluded on %s", day.date(), record.id)
        return record.model_copy(update={"exclude_dates": list(record.exclude_dates)})

    logger.info("Excluding %s from series %s", day.date(), record.id)
    return record.model_copy(update={"exclude_dates": [*record.exclude_dates, day]})


def serialize_exclusions(record: TaskRecord) -> list[str]:
    """ISO-8601 strings for persisting ``excludeDates``."""
    return [ex.isoformat() for ex in record.exclude_dates]
