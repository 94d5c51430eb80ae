"""Command-line entry for taskcal.

Reads a JSON array of task records, expands the recurring ones over a window
and prints the occurrences as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

from .config_loader import load_config
from .datetime_utils import parse_instant, view_window
from .exceptions import ConfigError, InvalidTimestamp
from .occurrence_filter import filter_overlapping, sort_occurrences
from .recurrence_expander import RecurrenceExpander
from .task_logging import configure_logging

logger = logging.getLogger("taskcal.cli")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for taskcal CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="taskcal",
        description="Expand recurring tasks into occurrences for a date window",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m taskcal tasks.json --start 2025-06-01 --end 2025-06-07T23:59:59
  python -m taskcal tasks.json --view month --date 2025-06-15 --filter
        """,
    )
    parser.add_argument("records", type=Path, help="JSON file holding a list of task records")
    parser.add_argument("--start", help="Window start (ISO-8601)")
    parser.add_argument("--end", help="Window end (ISO-8601)")
    parser.add_argument(
        "--view",
        choices=["month", "week", "day", "agenda"],
        help="Derive the window from a calendar view (default from config)",
    )
    parser.add_argument("--date", help="Reference date for --view (YYYY-MM-DD, default today)")
    parser.add_argument("--config", help="Path to a YAML/JSON config file")
    parser.add_argument(
        "--filter",
        action="store_true",
        help="Also drop non-recurring records that fall outside the window",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _resolve_window(args: argparse.Namespace, default_view: str, tz: str) -> tuple[Any, Any]:
    if args.start or args.end:
        if not (args.start and args.end):
            raise InvalidTimestamp("Both --start and --end are required", field="window")
        return (
            parse_instant(args.start, field="start", default_timezone=tz),
            parse_instant(args.end, field="end", default_timezone=tz),
        )
    reference = parse_instant(args.date, field="date", default_timezone=tz).date() if args.date else date.today()
    return view_window(args.view or default_view, reference, tz)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the taskcal CLI.

    Returns:
        Process exit code (0 on success, 2 on usage or input errors)
    """
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"taskcal: {e}", file=sys.stderr)
        return 2
    configure_logging(config.log_level, debug_mode=args.debug)

    try:
        raw = json.loads(args.records.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"taskcal: cannot read {args.records}: {e}", file=sys.stderr)
        return 2
    if not isinstance(raw, list):
        print("taskcal: records file must contain a JSON list", file=sys.stderr)
        return 2

    try:
        start, end = _resolve_window(args, config.default_view, config.default_timezone)
    except InvalidTimestamp as e:
        print(f"taskcal: {e}", file=sys.stderr)
        return 2

    expander = RecurrenceExpander(config)
    result = expander.expand_detailed(raw, start, end)
    occurrences = result.occurrences
    if args.filter:
        occurrences = sort_occurrences(filter_overlapping(occurrences, start, end))

    payload = [occ.model_dump(mode="json", by_alias=True) for occ in occurrences]
    print(json.dumps(payload, indent=2, ensure_ascii=False))

    for skipped in result.skipped:
        print(f"taskcal: skipped {skipped.record_id}: {skipped.reason}", file=sys.stderr)
    logger.info("Printed %d occurrences (%d records skipped)", len(payload), result.skipped_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
