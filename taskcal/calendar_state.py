"""Explicit calendar view state.

Holds the selected view, the date being shown and the record snapshot, and
derives the visible occurrences from them. Transitions return new states.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from .datetime_utils import TimezoneLike, resolve_timezone, view_days, view_window
from .models import CalendarView, TaskRecord
from .occurrence_filter import (
    filter_overlapping,
    group_by_day,
    group_by_start_date,
    sort_occurrences,
)
from .recurrence_expander import RecurrenceExpander

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarState:
    """Immutable view state for a calendar screen."""

    view: CalendarView = CalendarView.WEEK
    current_date: date = field(default_factory=date.today)
    records: tuple[TaskRecord, ...] = ()
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        object.__setattr__(self, "view", CalendarView(self.view))
        if isinstance(self.current_date, datetime):
            object.__setattr__(self, "current_date", self.current_date.date())
        object.__setattr__(self, "records", tuple(self.records))

    def with_view(self, view: CalendarView | str) -> CalendarState:
        return replace(self, view=CalendarView(view))

    def with_date(self, current_date: date) -> CalendarState:
        return replace(self, current_date=current_date)

    def with_records(self, records: list[TaskRecord] | tuple[TaskRecord, ...]) -> CalendarState:
        return replace(self, records=tuple(records))

    def navigate(self, step: int) -> CalendarState:
        """Move ``step`` periods forward (negative for backward)."""
        if self.view == CalendarView.MONTH:
            target = self.current_date + relativedelta(months=step)
        elif self.view == CalendarView.WEEK:
            target = self.current_date + timedelta(weeks=step)
        else:
            target = self.current_date + timedelta(days=step)
        return self.with_date(target)

    def window(self) -> tuple[datetime, datetime]:
        """Query window for the current view."""
        return view_window(self.view, self.current_date, self.timezone)

    def days(self) -> list[date]:
        return view_days(self.view, self.current_date)

    def visible_occurrences(self, expander: Optional[RecurrenceExpander] = None) -> list[TaskRecord]:
        """Expand the snapshot, keep what overlaps the window, sort it."""
        expander = expander or RecurrenceExpander({"default_timezone": self.timezone})
        start, end = self.window()
        expanded = expander.expand(self.records, start, end)
        visible = sort_occurrences(filter_overlapping(expanded, start, end))
        logger.debug("%s view on %s: %d visible occurrences", self.view.value, self.current_date, len(visible))
        return visible

    def occurrences_by_day(
        self, expander: Optional[RecurrenceExpander] = None, tz: TimezoneLike = None
    ) -> dict[date, list[TaskRecord]]:
        """Visible occurrences bucketed per visible day.

        The agenda view lists only the dates that have occurrences.
        """
        zone = resolve_timezone(tz if tz is not None else self.timezone)
        visible = self.visible_occurrences(expander)
        if self.view == CalendarView.AGENDA:
            return group_by_start_date(visible, zone)
        return group_by_day(visible, self.days(), zone)
