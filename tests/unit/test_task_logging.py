"""Unit tests for taskcal.task_logging."""

import logging

import pytest
from colorlog import ColoredFormatter

from taskcal.task_logging import configure_logging, resolve_level

pytestmark = pytest.mark.unit


@pytest.fixture
def root_logger(monkeypatch):
    """Root and package loggers whose handlers and levels are restored after the test."""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    package_logger = logging.getLogger("taskcal")
    monkeypatch.setattr(package_logger, "level", package_logger.level)
    return root


def test_resolve_level_defaults_to_info():
    assert resolve_level(None) == logging.INFO
    assert resolve_level("nonsense") == logging.INFO
    assert resolve_level("warning") == logging.WARNING


def test_debug_mode_forces_debug():
    assert resolve_level("ERROR", debug_mode=True) == logging.DEBUG


def test_environment_wins(monkeypatch):
    monkeypatch.setenv("TASKCAL_LOG_LEVEL", "error")
    assert resolve_level("DEBUG", debug_mode=True) == logging.ERROR

    monkeypatch.setenv("TASKCAL_DEBUG", "yes")
    assert resolve_level("ERROR") == logging.DEBUG


def test_configure_logging_installs_single_colored_handler(root_logger):
    # pytest's capture handlers are attached for the test call, so clear them here
    root_logger.handlers.clear()

    level = configure_logging("WARNING")
    configure_logging("WARNING")

    colored = [h for h in root_logger.handlers if isinstance(h.formatter, ColoredFormatter)]
    assert level == logging.WARNING
    assert len(root_logger.handlers) == 1
    assert len(colored) == 1
    assert logging.getLogger("taskcal").level == logging.WARNING


def test_configure_logging_keeps_existing_handlers(root_logger):
    existing = logging.NullHandler()
    root_logger.handlers[:] = [existing]

    configure_logging("INFO")

    assert root_logger.handlers == [existing]
