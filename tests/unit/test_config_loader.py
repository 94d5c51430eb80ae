"""Unit tests for taskcal.config_loader."""

import json

import pytest

from taskcal.config_loader import Config, env_overrides, load_config
from taskcal.exceptions import ConfigError

pytestmark = pytest.mark.unit


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "missing.yaml", environ={})

    assert cfg == Config()


def test_yaml_file_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "default_timezone: Europe/Berlin\n"
        "max_occurrences_per_record: 200\n"
        "default_view: month\n"
        "log_level: debug\n"
    )

    cfg = load_config(path, environ={})

    assert cfg.default_timezone == "Europe/Berlin"
    assert cfg.max_occurrences_per_record == 200
    assert cfg.default_view == "month"
    assert cfg.log_level == "DEBUG"


def test_json_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_view": "day"}))

    assert load_config(path, environ={}).default_view == "day"


def test_empty_yaml_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(path, environ={}) == Config()


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_unparseable_file_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("default_view: [unclosed\n")

    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("default_timezone: Europe/Berlin\n")

    cfg = load_config(
        path,
        environ={"TASKCAL_DEFAULT_TIMEZONE": "Asia/Tokyo", "TASKCAL_MAX_OCCURRENCES": "10"},
    )

    assert cfg.default_timezone == "Asia/Tokyo"
    assert cfg.max_occurrences_per_record == 10


def test_env_overrides_ignores_empty_values():
    assert env_overrides({"TASKCAL_LOG_LEVEL": "", "UNRELATED": "x"}) == {}


@pytest.mark.parametrize(
    "data,field,expected",
    [
        ({"default_timezone": "Mars/Olympus"}, "default_timezone", "UTC"),
        ({"max_occurrences_per_record": "lots"}, "max_occurrences_per_record", None),
        ({"max_occurrences_per_record": 0}, "max_occurrences_per_record", 1),
        ({"default_view": "year"}, "default_view", "week"),
        ({"log_level": None}, "log_level", "INFO"),
    ],
)
def test_from_dict_coerces_bad_values(data, field, expected):
    assert getattr(Config.from_dict(data), field) == expected


def test_default_view_environment_override(tmp_path):
    cfg = load_config(tmp_path / "missing.yaml", environ={"TASKCAL_DEFAULT_VIEW": "Agenda"})

    assert cfg.default_view == "agenda"


def test_default_config_is_uncapped(tmp_path):
    assert load_config(tmp_path / "missing.yaml", environ={}).max_occurrences_per_record is None
