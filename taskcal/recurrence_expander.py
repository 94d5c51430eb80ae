"""Recurring task expansion.

Turns task records carrying a daily / weekly / custom recurrence rule into the
concrete occurrences that overlap a query window. Expansion is a pure function
of its inputs: no clock, no I/O, no state shared between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Union

from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule, rruleset

from .datetime_utils import (
    DEFAULT_TIMEZONE,
    at_time_of,
    calendar_date_in,
    end_of_year,
    js_weekday,
    parse_instant,
)
from .exceptions import InvalidDuration, MalformedOccurrenceData, RecurrenceExpansionError
from .models import ExpansionResult, RecurrenceType, SkippedRecord, TaskRecord
from .record_adapter import RecordAdapter

logger = logging.getLogger(__name__)

RecordLike = Union[TaskRecord, Mapping[str, Any]]
InstantLike = Union[datetime, date, str]

ONE_DAY = timedelta(days=1)

# Store weekday numbering (0=Sunday .. 6=Saturday) -> rrule weekday
RRULE_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


@dataclass
class RecurrenceExpanderConfig:
    """Configuration for recurrence expansion."""

    default_timezone: str = DEFAULT_TIMEZONE
    # None: bounded only by the recurrence horizon
    max_occurrences_per_record: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Any) -> RecurrenceExpanderConfig:
        """Extract expansion configuration from a settings object or mapping.

        Args:
            settings: Config instance, mapping or None

        Returns:
            RecurrenceExpanderConfig with values from settings or defaults
        """
        if settings is None:
            return cls()
        if isinstance(settings, cls):
            return settings

        def _get(key: str, default: Any) -> Any:
            if isinstance(settings, Mapping):
                return settings.get(key, default)
            return getattr(settings, key, default)

        raw_max = _get("max_occurrences_per_record", None)
        return cls(
            default_timezone=_get("default_timezone", DEFAULT_TIMEZONE),
            max_occurrences_per_record=int(raw_max) if raw_max is not None else None,
        )


def excluded_days(record: TaskRecord) -> frozenset[date]:
    """Calendar dates suppressed for ``record``, seen in the anchor's timezone."""
    tz = record.start.tzinfo
    return frozenset(calendar_date_in(ex, tz) for ex in record.exclude_dates)


def is_excluded(day: date, excluded: frozenset[date]) -> bool:
    """True when ``day`` carries a "deleted this occurrence" exclusion."""
    return day in excluded


def overlaps_window(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> bool:
    """Strict interval overlap; touching a boundary does not count."""
    return end > window_start and start < window_end


class RecurrenceExpander:
    """Expand recurring task records into occurrences inside a window.

    Records with no (or an unknown) recurrence rule pass through unchanged and
    are not window-filtered; callers apply
    ``occurrence_filter.filter_overlapping`` when they need that.
    """

    def __init__(self, settings: Any = None):
        """Initialize expander.

        Args:
            settings: Config, mapping or RecurrenceExpanderConfig (optional)
        """
        self.config = RecurrenceExpanderConfig.from_settings(settings)
        self.adapter = RecordAdapter(self.config.default_timezone)
        logger.debug(
            "RecurrenceExpander initialized: default_timezone=%s, max_occurrences=%s",
            self.config.default_timezone,
            self.config.max_occurrences_per_record,
        )

    def expand(
        self,
        records: Iterable[RecordLike],
        range_start: InstantLike,
        range_end: InstantLike,
    ) -> list[TaskRecord]:
        """Expand records into occurrences overlapping ``[range_start, range_end]``.

        Args:
            records: TaskRecord instances or raw store mappings
            range_start: Window start
            range_end: Window end

        Returns:
            Occurrences in input order, chronological within each record

        Raises:
            InvalidTimestamp: If a window bound cannot be parsed
        """
        return self.expand_detailed(records, range_start, range_end).occurrences

    def expand_detailed(
        self,
        records: Iterable[RecordLike],
        range_start: InstantLike,
        range_end: InstantLike,
    ) -> ExpansionResult:
        """Expand records and report the ones that had to be skipped."""
        window_start = parse_instant(
            range_start, field="rangeStart", default_timezone=self.config.default_timezone
        )
        window_end = parse_instant(
            range_end, field="rangeEnd", default_timezone=self.config.default_timezone
        )

        result = ExpansionResult()
        for raw in records:
            try:
                record = self._coerce(raw)
                result.occurrences.extend(self.expand_record(record, window_start, window_end))
            except RecurrenceExpansionError as e:
                record_id = e.record_id or _raw_id(raw)
                logger.warning("Skipping record %s: %s", record_id, e)
                result.skipped.append(SkippedRecord(record_id=record_id, error=e))

        logger.debug(
            "Expanded to %d occurrences for window %s .. %s (%d skipped)",
            len(result.occurrences),
            window_start,
            window_end,
            result.skipped_count,
        )
        return result

    def expand_record(
        self, record: TaskRecord, window_start: datetime, window_end: datetime
    ) -> list[TaskRecord]:
        """Expand a single validated record.

        Raises:
            InvalidDuration: If the anchor ends before it starts
        """
        if record.end < record.start:
            raise InvalidDuration(
                f"Record {record.id} ends ({record.end.isoformat()}) before it starts "
                f"({record.start.isoformat()})",
                record_id=record.id,
            )

        rule = record.recurrence_type
        if rule is None:
            logger.debug("Unknown recurrence %r on %s; passing through", record.recurrence, record.id)
            return [record]
        if rule == RecurrenceType.NONE:
            return [record]

        rule_set = self.build_ruleset(record, window_end)
        first_day = self._first_candidate_day(record, window_start)
        after = datetime.combine(first_day, time.min, tzinfo=record.start.tzinfo)

        duration = record.duration
        limit = self.config.max_occurrences_per_record
        occurrences: list[TaskRecord] = []
        for occ_start in rule_set.xafter(after, inc=True):
            # rrule drops sub-second precision
            occ_start = occ_start.replace(microsecond=record.start.microsecond)
            if occ_start >= window_end:
                break
            occ_end = occ_start + duration
            if not overlaps_window(occ_start, occ_end, window_start, window_end):
                continue
            occurrences.append(record.model_copy(update={"start": occ_start, "end": occ_end}))
            if limit is not None and len(occurrences) >= limit:
                logger.warning(
                    "Expansion of %s limited to %d occurrences", record.id, limit
                )
                break

        return occurrences

    def horizon_for(self, record: TaskRecord, window_end: datetime) -> date:
        """Last calendar date (inclusive) occurrences may fall on.

        ``recurrenceEnd`` when set, otherwise December 31 of the window end's
        year. Both are read in the anchor's timezone.
        """
        tz = record.start.tzinfo
        if record.recurrence_end is not None:
            return calendar_date_in(record.recurrence_end, tz)
        return end_of_year(window_end.astimezone(tz)).date()

    def build_ruleset(self, record: TaskRecord, window_end: datetime) -> rruleset:
        """Build the occurrence rule set for a daily / weekly / custom record.

        Occurrences keep the anchor's wall-clock time in the anchor's timezone
        and stop at the end of the horizon day. Excluded calendar days become
        EXDATEs at the anchor's time of day, the only time a candidate on
        that day can start.
        """
        dtstart = record.start.replace(microsecond=0)
        horizon = self.horizon_for(record, window_end)
        until = datetime.combine(horizon, time.max, tzinfo=dtstart.tzinfo)

        if record.recurrence_type == RecurrenceType.DAILY:
            rule = rrule(DAILY, dtstart=dtstart, until=until)
        else:
            target_days = record.repeat_days or [js_weekday(dtstart.date())]
            rule = rrule(
                WEEKLY,
                dtstart=dtstart,
                until=until,
                byweekday=[RRULE_WEEKDAYS[d] for d in target_days],
                wkst=MO,
            )

        rule_set = rruleset()
        rule_set.rrule(rule)
        for day in sorted(excluded_days(record)):
            rule_set.exdate(at_time_of(day, dtstart))
        return rule_set

    def _first_candidate_day(self, record: TaskRecord, window_start: datetime) -> date:
        # Earlier days end before the window opens; one day of slack for DST shifts.
        anchor_day = record.start.date()
        reachable = calendar_date_in(window_start - record.duration, record.start.tzinfo) - ONE_DAY
        return max(anchor_day, reachable)

    def _coerce(self, raw: RecordLike) -> TaskRecord:
        if isinstance(raw, TaskRecord):
            return raw
        if isinstance(raw, Mapping):
            return self.adapter.parse(raw)
        raise MalformedOccurrenceData(f"Unsupported record type: {type(raw).__name__}")


def _raw_id(raw: Any) -> Optional[str]:
    if isinstance(raw, TaskRecord):
        return raw.id
    if isinstance(raw, Mapping):
        value = raw.get("id", raw.get("_id"))
        return str(value) if value is not None else None
    return None


def expand_records(
    records: Iterable[RecordLike],
    range_start: InstantLike,
    range_end: InstantLike,
    settings: Any = None,
) -> list[TaskRecord]:
    """Expand ``records`` over a window with a freshly configured expander."""
    return RecurrenceExpander(settings).expand(records, range_start, range_end)
