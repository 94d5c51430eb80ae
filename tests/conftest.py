"""Shared fixtures for taskcal tests."""

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from taskcal.models import TaskRecord
from taskcal.recurrence_expander import RecurrenceExpander

TASKCAL_ENV_VARS = (
    "TASKCAL_DEBUG",
    "TASKCAL_LOG_LEVEL",
    "TASKCAL_DEFAULT_TIMEZONE",
    "TASKCAL_MAX_OCCURRENCES",
    "TASKCAL_DEFAULT_VIEW",
)


def utc(value: str) -> datetime:
    """Parse a naive ISO string as a UTC instant."""
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


@pytest.fixture(autouse=True)
def clean_taskcal_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Keep TASKCAL_* variables from the host out of the tests."""
    for name in TASKCAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def expander() -> RecurrenceExpander:
    return RecurrenceExpander()


@pytest.fixture
def make_record() -> Callable[..., TaskRecord]:
    """Factory for anchor records: Monday 2025-06-02, 09:00-10:00 UTC by default."""

    def _make(
        record_id: str = "task-1",
        start: str = "2025-06-02T09:00:00",
        end: str = "2025-06-02T10:00:00",
        **kwargs: Any,
    ) -> TaskRecord:
        return TaskRecord(id=record_id, title="Standup", start=utc(start), end=utc(end), **kwargs)

    return _make


@pytest.fixture
def june_week() -> tuple[datetime, datetime]:
    """Window 2025-06-01 .. 2025-06-07 (end of day)."""
    return utc("2025-06-01T00:00:00"), utc("2025-06-07T23:59:59")
