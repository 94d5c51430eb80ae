"""taskcal - recurring task expansion for calendar views.

Expands daily / weekly / custom recurring tasks into the concrete occurrences
that fall inside a calendar view window, honouring per-occurrence exclusions
and recurrence end dates.
"""

__version__ = "0.1.0"

from .calendar_state import CalendarState
from .exceptions import (
    ConfigError,
    InvalidDuration,
    InvalidTimestamp,
    MalformedOccurrenceData,
    RecurrenceExpansionError,
)
from .exclusions import exclude_occurrence
from .models import CalendarView, ExpansionResult, RecurrenceType, SkippedRecord, TaskRecord
from .occurrence_filter import filter_overlapping, sort_occurrences
from .record_adapter import RecordAdapter
from .recurrence_expander import RecurrenceExpander, expand_records

__all__ = [
    "CalendarState",
    "CalendarView",
    "ConfigError",
    "ExpansionResult",
    "InvalidDuration",
    "InvalidTimestamp",
    "MalformedOccurrenceData",
    "RecordAdapter",
    "RecurrenceExpander",
    "RecurrenceExpansionError",
    "RecurrenceType",
    "SkippedRecord",
    "TaskRecord",
    "exclude_occurrence",
    "expand_records",
    "filter_overlapping",
    "sort_occurrences",
]
