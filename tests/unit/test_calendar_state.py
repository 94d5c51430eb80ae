"""Unit tests for taskcal.calendar_state."""

from datetime import UTC, date, datetime

import pytest

from taskcal.calendar_state import CalendarState
from taskcal.models import CalendarView

pytestmark = pytest.mark.unit


def test_transitions_return_new_state():
    state = CalendarState(view="week", current_date=date(2025, 6, 4))

    month = state.with_view("month")

    assert state.view == CalendarView.WEEK
    assert month.view == CalendarView.MONTH
    assert month.current_date == date(2025, 6, 4)


@pytest.mark.parametrize(
    "view,step,expected",
    [
        ("day", 1, date(2025, 1, 31)),
        ("week", -1, date(2025, 1, 23)),
        ("month", 1, date(2025, 2, 28)),
    ],
)
def test_navigate(view, step, expected):
    start = date(2025, 1, 30) if view != "month" else date(2025, 1, 31)
    state = CalendarState(view=view, current_date=start)

    assert state.navigate(step).current_date == expected


def test_window_matches_view():
    state = CalendarState(view="week", current_date=date(2025, 6, 4))

    start, end = state.window()

    assert start == datetime(2025, 6, 2, tzinfo=UTC)
    assert end.date() == date(2025, 6, 8)


def test_visible_occurrences_expands_filters_and_sorts(make_record):
    daily = make_record("daily", start="2025-06-02T18:00:00", end="2025-06-02T19:00:00", recurrence="daily")
    one_off = make_record("one-off", start="2025-06-03T08:00:00", end="2025-06-03T08:30:00")
    old = make_record("old", start="2024-03-01T08:00:00", end="2024-03-01T09:00:00")
    state = CalendarState(view="day", current_date=date(2025, 6, 3), records=[daily, one_off, old])

    visible = state.visible_occurrences()

    assert [o.id for o in visible] == ["one-off", "daily"]


def test_occurrences_by_day(make_record):
    weekly = make_record(recurrence="custom", repeat_days=[1, 5])
    state = CalendarState(view="week", current_date=date(2025, 6, 4), records=(weekly,))

    grouped = state.occurrences_by_day()

    assert len(grouped) == 7
    assert [d.day for d, occs in grouped.items() if occs] == [2, 6]


def test_month_view_queries_calendar_month_only(make_record):
    daily = make_record(start="2025-05-30T09:00:00", end="2025-05-30T10:00:00", recurrence="daily")
    state = CalendarState(view="month", current_date=date(2025, 6, 15), records=(daily,))

    grouped = state.occurrences_by_day()

    assert min(grouped) == date(2025, 5, 26)
    assert grouped[date(2025, 5, 31)] == []
    assert len(grouped[date(2025, 6, 1)]) == 1
    assert len(grouped[date(2025, 6, 30)]) == 1
    assert grouped[date(2025, 7, 1)] == []


def test_agenda_groups_by_start_date(make_record):
    late = make_record("late", start="2025-06-04T18:00:00", end="2025-06-04T19:00:00", recurrence="daily")
    early = make_record("early", start="2025-06-04T07:00:00", end="2025-06-04T07:30:00")
    other_day = make_record("other", start="2025-06-05T07:00:00", end="2025-06-05T07:30:00")
    state = CalendarState(view="agenda", current_date=date(2025, 6, 4), records=(late, early, other_day))

    grouped = state.occurrences_by_day()

    assert list(grouped) == [date(2025, 6, 4)]
    assert [o.id for o in grouped[date(2025, 6, 4)]] == ["early", "late"]


def test_agenda_navigates_by_day():
    state = CalendarState(view="agenda", current_date=date(2025, 6, 4))

    assert state.navigate(1).current_date == date(2025, 6, 5)
