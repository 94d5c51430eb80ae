"""Validating ingestion boundary between the task store and the expander.

Backends return the same task in several shapes (``_id`` vs ``id``, ``date``
vs ``start``, snake_case vs camelCase). ``RecordAdapter`` folds those variants
into the canonical ``TaskRecord`` shape and parses every instant explicitly,
so malformed timestamps fail here instead of flowing into date arithmetic.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import ValidationError

from .datetime_utils import TimezoneLike, parse_instant, resolve_timezone
from .exceptions import InvalidTimestamp, MalformedOccurrenceData
from .models import SkippedRecord, TaskRecord

logger = logging.getLogger(__name__)

# Backend field name (lower-cased) -> canonical field name
FIELD_ALIASES: dict[str, str] = {
    "id": "id",
    "_id": "id",
    "taskid": "id",
    "task_id": "id",
    "todoid": "id",
    "todo_id": "id",
    "eventid": "id",
    "title": "title",
    "summary": "title",
    "name": "title",
    "subject": "title",
    "description": "description",
    "start": "start",
    "date": "start",
    "starttime": "start",
    "start_time": "start",
    "end": "end",
    "endtime": "end",
    "end_time": "end",
    "recurrence": "recurrence",
    "repeat": "recurrence",
    "repeatdays": "repeatDays",
    "repeat_days": "repeatDays",
    "days": "repeatDays",
    "recurrenceend": "recurrenceEnd",
    "recurrence_end": "recurrenceEnd",
    "repeatuntil": "recurrenceEnd",
    "repeat_until": "recurrenceEnd",
    "excludedates": "excludeDates",
    "exclude_dates": "excludeDates",
    "exdates": "excludeDates",
    "completed": "completed",
    "tasklist": "taskList",
    "task_list": "taskList",
    "deadline": "deadline",
}

INSTANT_FIELDS = ("start", "end", "recurrenceEnd", "deadline")


class RecordAdapter:
    """Normalize raw store payloads into ``TaskRecord`` instances."""

    def __init__(self, default_timezone: TimezoneLike = None):
        """Initialize adapter.

        Args:
            default_timezone: Timezone applied to naive timestamps
        """
        self.default_timezone = resolve_timezone(default_timezone)

    def normalize_fields(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Rename backend field variants to canonical names.

        The first occurrence of a canonical field wins; unknown keys are
        preserved so they survive on the expanded occurrences.
        """
        normalized: dict[str, Any] = {}
        for key, value in raw.items():
            canonical = FIELD_ALIASES.get(str(key).lower(), key)
            if canonical in normalized:
                logger.debug("Ignoring duplicate field %r for %r", key, canonical)
                continue
            normalized[canonical] = value

        if normalized.get("end") is None and normalized.get("start") is not None:
            normalized["end"] = normalized["start"]
        if normalized.get("recurrence") is None:
            normalized["recurrence"] = "none"
        if "id" in normalized and normalized["id"] is not None:
            normalized["id"] = str(normalized["id"])
        return normalized

    def parse(self, raw: Mapping[str, Any]) -> TaskRecord:
        """Parse one raw record.

        Raises:
            InvalidTimestamp: If an instant field cannot be parsed
            MalformedOccurrenceData: For any other unusable record data
        """
        if not isinstance(raw, Mapping):
            raise MalformedOccurrenceData(f"Record is not a mapping: {type(raw).__name__}")

        data = self.normalize_fields(raw)
        record_id: Optional[str] = data.get("id")
        if not record_id:
            raise MalformedOccurrenceData("Record has no id")
        if data.get("start") is None:
            raise MalformedOccurrenceData("Record has no start", record_id=record_id)

        # Naive values after the anchor are read in the anchor's timezone
        data["start"] = self._instant(data["start"], "start", record_id, self.default_timezone)
        anchor_tz = data["start"].tzinfo
        for name in INSTANT_FIELDS:
            if name != "start" and data.get(name) is not None:
                data[name] = self._instant(data[name], name, record_id, anchor_tz)

        excludes = data.get("excludeDates") or []
        if isinstance(excludes, (str, bytes)) or not isinstance(excludes, Iterable):
            raise MalformedOccurrenceData(
                "excludeDates must be a list of timestamps", record_id=record_id
            )
        data["excludeDates"] = [
            self._instant(v, "excludeDates", record_id, anchor_tz) for v in excludes
        ]

        if data.get("repeatDays") is None:
            data["repeatDays"] = []

        try:
            return TaskRecord.model_validate(data)
        except ValidationError as e:
            raise MalformedOccurrenceData(
                f"Invalid record {record_id}: {e.error_count()} validation error(s)",
                record_id=record_id,
            ) from e

    def parse_many(
        self, raws: Iterable[Mapping[str, Any]]
    ) -> tuple[list[TaskRecord], list[SkippedRecord]]:
        """Parse a batch; bad records are reported, never fatal to the batch."""
        records: list[TaskRecord] = []
        skipped: list[SkippedRecord] = []
        for raw in raws:
            try:
                records.append(self.parse(raw))
            except MalformedOccurrenceData as e:
                logger.warning("Skipping malformed record %s: %s", e.record_id, e)
                skipped.append(SkippedRecord(record_id=e.record_id, error=e))
        return records, skipped

    def _instant(self, value: Any, field: str, record_id: Optional[str], tz: TimezoneLike):
        try:
            return parse_instant(
                value,
                field=field,
                default_timezone=tz,
                record_id=record_id,
            )
        except InvalidTimestamp:
            logger.debug("Bad %s value %r on record %s", field, value, record_id)
            raise
