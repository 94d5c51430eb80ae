"""Custom exception hierarchy for recurring-task expansion.

Expansion errors are scoped to a single record: the expander catches them,
logs the failure and moves on to the next record. Errors about the query
window or configuration are not record errors and propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Optional


class RecurrenceExpansionError(Exception):
    """Base exception for all expansion errors.

    Attributes:
        record_id: ID of the offending record, when known
    """

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class MalformedOccurrenceData(RecurrenceExpansionError):
    """Record data cannot be turned into a canonical task record.

    Raised when:
    - A required field (id, start) is missing
    - repeatDays holds values outside 0..6
    - A field has the wrong type for the canonical shape
    """


class InvalidTimestamp(MalformedOccurrenceData):
    """An instant could not be parsed.

    Raised for unparseable start/end/recurrenceEnd/excludeDates entries and
    for unparseable query window bounds.
    """

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        field: Optional[str] = None,
        value: Any = None,
    ):
        super().__init__(message, record_id=record_id)
        self.field = field
        self.value = value


class InvalidDuration(RecurrenceExpansionError):
    """The anchor occurrence ends before it starts."""


class ConfigError(ValueError):
    """Configuration file is unreadable or has the wrong shape."""
