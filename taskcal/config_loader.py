"""taskcal.config_loader

Config loader for taskcal.

- Reads YAML (PyYAML) or JSON files, chosen by file suffix.
- Applies environment overrides (TASKCAL_*) on top of file values.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .datetime_utils import DEFAULT_TIMEZONE, resolve_timezone
from .exceptions import ConfigError
from .models import CalendarView

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "taskcal" / "config.yaml"


@dataclass
class Config:
    """Typed configuration for taskcal.

    Fields:
        default_timezone: IANA timezone applied to naive timestamps
        max_occurrences_per_record: optional cap on occurrences emitted per
            record; None keeps every occurrence up to the recurrence horizon
        default_view: view used when none is requested (month/week/day/agenda)
        log_level: logging level name
    """

    default_timezone: str = DEFAULT_TIMEZONE
    max_occurrences_per_record: Optional[int] = None
    default_view: str = CalendarView.WEEK.value
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Coerces numeric-like values to int, falls back to defaults for invalid
        timezones and views, and logs a warning whenever it coerces.
        """
        if data is None:
            data = {}

        tz_name = str(data.get("default_timezone") or DEFAULT_TIMEZONE)
        try:
            resolve_timezone(tz_name)
        except ValueError:
            logger.warning("Invalid default_timezone %r; using %s", tz_name, DEFAULT_TIMEZONE)
            tz_name = DEFAULT_TIMEZONE

        raw_max = data.get("max_occurrences_per_record")
        max_occurrences: Optional[int] = None
        if raw_max is not None and raw_max != "":
            try:
                max_occurrences = int(raw_max)
            except (TypeError, ValueError):
                logger.warning(
                    "Config max_occurrences_per_record=%r is not an int; leaving uncapped", raw_max
                )
            else:
                if max_occurrences < 1:
                    logger.warning(
                        "max_occurrences_per_record %d below minimum; coercing to 1", max_occurrences
                    )
                    max_occurrences = 1

        view = str(data.get("default_view") or CalendarView.WEEK.value).lower()
        if view not in {v.value for v in CalendarView}:
            logger.warning("Unknown default_view %r; using week", view)
            view = CalendarView.WEEK.value

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            default_timezone=tz_name,
            max_occurrences_per_record=max_occurrences,
            default_view=view,
            log_level=log_level,
        )


def env_overrides(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Build config overrides from environment variables.

    Recognizes:
    - TASKCAL_DEFAULT_TIMEZONE -> 'default_timezone'
    - TASKCAL_MAX_OCCURRENCES -> 'max_occurrences_per_record'
    - TASKCAL_DEFAULT_VIEW -> 'default_view'
    - TASKCAL_LOG_LEVEL -> 'log_level'
    """
    env = os.environ if environ is None else environ
    mapping = {
        "TASKCAL_DEFAULT_TIMEZONE": "default_timezone",
        "TASKCAL_MAX_OCCURRENCES": "max_occurrences_per_record",
        "TASKCAL_DEFAULT_VIEW": "default_view",
        "TASKCAL_LOG_LEVEL": "log_level",
    }
    return {key: env[var] for var, key in mapping.items() if env.get(var)}


def _load_mapping(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to parse config file {path}: {e}") from e


def load_config(path: str | Path | None = None, environ: Optional[dict[str, str]] = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file (default ~/.config/taskcal/config.yaml)
        environ: Environment mapping used for overrides (default os.environ)

    Returns:
        Config dataclass instance with file values, then environment overrides

    Behavior:
    - If file is missing: defaults plus environment overrides.
    - If file exists but top-level is not a mapping: raises ConfigError.
    """
    p = Path(path) if path else DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    data: dict[str, Any] = {}
    if p.exists():
        raw = _load_mapping(p)
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
            raise ConfigError("Config file must contain a mapping at top level")
        data.update(raw)
        logger.info("Loaded configuration from %s", p)
    else:
        logger.info("Config file %s not found; using defaults", p)

    overrides = env_overrides(environ)
    if overrides:
        logger.debug("Environment overrides: %s", ", ".join(sorted(overrides)))
        data.update(overrides)

    cfg = Config.from_dict(data)
    logger.debug("Configuration values: %s", cfg)
    return cfg
