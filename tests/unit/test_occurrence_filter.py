"""Unit tests for taskcal.occurrence_filter."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from taskcal.models import TaskRecord
from taskcal.occurrence_filter import (
    filter_overlapping,
    group_by_day,
    group_by_start_date,
    overlaps,
    sort_occurrences,
)

pytestmark = pytest.mark.unit


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


def _task(record_id: str, start: str, end: str) -> TaskRecord:
    return TaskRecord(id=record_id, start=_utc(start), end=_utc(end))


WINDOW = (_utc("2025-06-02T00:00:00"), _utc("2025-06-08T23:59:59"))


def test_overlaps_is_strict():
    assert overlaps(_task("a", "2025-06-02T09:00:00", "2025-06-02T10:00:00"), *WINDOW)
    assert not overlaps(_task("b", "2025-06-01T23:00:00", "2025-06-02T00:00:00"), *WINDOW)


def test_filter_overlapping_drops_pass_through_records_outside_window():
    inside = _task("in", "2025-06-03T09:00:00", "2025-06-03T10:00:00")
    before = _task("before", "2025-05-01T09:00:00", "2025-05-01T10:00:00")
    after = _task("after", "2025-06-09T09:00:00", "2025-06-09T10:00:00")

    assert filter_overlapping([before, inside, after], *WINDOW) == [inside]


def test_filter_overlapping_keeps_zero_length_task_inside_window():
    due = _task("due", "2025-06-04T17:00:00", "2025-06-04T17:00:00")

    assert filter_overlapping([due], *WINDOW) == [due]


def test_sort_occurrences_is_stable():
    first = _task("x", "2025-06-03T09:00:00", "2025-06-03T10:00:00")
    twin = _task("y", "2025-06-03T09:00:00", "2025-06-03T10:00:00")
    early = _task("z", "2025-06-02T09:00:00", "2025-06-02T09:30:00")

    assert [o.id for o in sort_occurrences([first, twin, early])] == ["z", "x", "y"]


def test_group_by_day_places_overnight_occurrence_on_both_days():
    overnight = _task("night", "2025-06-03T22:00:00", "2025-06-04T02:00:00")
    morning = _task("morning", "2025-06-04T09:00:00", "2025-06-04T10:00:00")
    days = [date(2025, 6, 3), date(2025, 6, 4), date(2025, 6, 5)]

    grouped = group_by_day([overnight, morning], days)

    assert [o.id for o in grouped[date(2025, 6, 3)]] == ["night"]
    assert [o.id for o in grouped[date(2025, 6, 4)]] == ["night", "morning"]
    assert grouped[date(2025, 6, 5)] == []


def test_group_by_start_date_lists_only_busy_days_in_order():
    later = _task("later", "2025-06-05T09:00:00", "2025-06-05T10:00:00")
    evening = _task("evening", "2025-06-03T18:00:00", "2025-06-03T19:00:00")
    morning = _task("morning", "2025-06-03T08:00:00", "2025-06-03T09:00:00")

    grouped = group_by_start_date([later, evening, morning])

    assert list(grouped) == [date(2025, 6, 3), date(2025, 6, 5)]
    assert [o.id for o in grouped[date(2025, 6, 3)]] == ["morning", "evening"]


def test_group_by_start_date_uses_given_timezone():
    late_utc = _task("late", "2025-06-03T20:00:00", "2025-06-03T21:00:00")

    grouped = group_by_start_date([late_utc], timezone(timedelta(hours=7)))

    assert list(grouped) == [date(2025, 6, 4)]
