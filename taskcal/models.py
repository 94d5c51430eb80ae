"""Data models for recurring task expansion."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


class RecurrenceType(str, Enum):
    """Supported recurrence rules."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> Optional[RecurrenceType]:
        """Return the matching member, or None for unknown values."""
        if value is None:
            return cls.NONE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class CalendarView(str, Enum):
    """Calendar view periods."""

    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    # Chronological list of the reference day's tasks, grouped by start date
    AGENDA = "agenda"


class TaskRecord(BaseModel):
    """Canonical task/event record as read by the expander.

    The anchor ``start``/``end`` pair is the first occurrence of a series.
    Occurrences produced by expansion are shallow copies of the record with
    ``start``/``end`` rewritten; they share the record ``id``.
    """

    id: str = Field(..., description="Series ID, shared by every occurrence")
    title: str = Field(default="", description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")

    # Anchor occurrence
    start: datetime = Field(..., description="Anchor occurrence start")
    end: datetime = Field(..., description="Anchor occurrence end")

    # Recurrence
    recurrence: str = Field(default=RecurrenceType.NONE.value, description="Recurrence rule")
    repeat_days: list[int] = Field(
        default_factory=list,
        alias="repeatDays",
        description="Weekdays (0=Sunday..6=Saturday) for weekly/custom rules",
    )
    recurrence_end: Optional[datetime] = Field(
        default=None, alias="recurrenceEnd", description="Last day of the series (inclusive)"
    )
    exclude_dates: list[datetime] = Field(
        default_factory=list,
        alias="excludeDates",
        description="Days whose occurrence was deleted",
    )

    # Task metadata
    completed: bool = Field(default=False, description="Completion flag")
    task_list: Optional[str] = Field(default=None, alias="taskList", description="Task list")
    deadline: Optional[datetime] = Field(default=None, description="Deadline")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("start")
    @classmethod
    def _ensure_aware(cls, dt: datetime) -> datetime:
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt

    @model_validator(mode="after")
    def _naive_in_anchor_timezone(self) -> TaskRecord:
        # Naive end, recurrenceEnd, deadline and exclusions share the anchor's zone
        tz = self.start.tzinfo
        for name in ("end", "recurrence_end", "deadline"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                setattr(self, name, value.replace(tzinfo=tz))
        if any(v.tzinfo is None for v in self.exclude_dates):
            self.exclude_dates = [
                v.replace(tzinfo=tz) if v.tzinfo is None else v for v in self.exclude_dates
            ]
        return self

    @field_validator("recurrence", mode="before")
    @classmethod
    def _normalize_recurrence(cls, value: Any) -> str:
        if value is None:
            return RecurrenceType.NONE.value
        if isinstance(value, RecurrenceType):
            return value.value
        return str(value).strip().lower()

    @field_validator("repeat_days")
    @classmethod
    def _validate_repeat_days(cls, values: list[int]) -> list[int]:
        for day in values:
            if not 0 <= day <= 6:
                raise ValueError(f"repeatDays value {day} outside 0..6")
        return sorted(set(values))

    @property
    def duration(self) -> timedelta:
        """Anchor occurrence duration."""
        return self.end - self.start

    @property
    def recurrence_type(self) -> Optional[RecurrenceType]:
        """Parsed recurrence rule, None when the stored value is unknown."""
        return RecurrenceType.parse(self.recurrence)

    @property
    def is_recurring(self) -> bool:
        """True for rules the expander knows how to expand."""
        return self.recurrence_type in (
            RecurrenceType.DAILY,
            RecurrenceType.WEEKLY,
            RecurrenceType.CUSTOM,
        )

    @field_serializer("start", "end", "recurrence_end", "deadline", when_used="json-unless-none")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()

    @field_serializer("exclude_dates", when_used="json")
    def serialize_exclude_dates(self, values: list[datetime]) -> list[str]:
        """Serialize exclusion days to ISO format."""
        return [v.isoformat() for v in values]


@dataclass(frozen=True)
class SkippedRecord:
    """A record the expander could not process."""

    record_id: Optional[str]
    error: Exception

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


@dataclass
class ExpansionResult:
    """Expansion output together with the records that were skipped."""

    occurrences: list[TaskRecord] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
