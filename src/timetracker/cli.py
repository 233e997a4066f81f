#!/usr/bin/env python3
"""
Command-line interface for tt with subcommand structure.

Provides subcommands for logging activities and reporting on them:
add, report, list, edit, resume, is-active, validate.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from . import config as config_module
from .activities import block_from_args, read_activities
from .collector import collect_blocks
from .commands import add_entry, edit, is_active, list_activities, resume
from .config import PrefixResolver, load_custom_config
from .config_validation import validate_and_warn, validate_config
from .errors import TTError, UsageError
from .output import setup_logging, user_output
from .paths import get_activities_file_name, get_default_log_file, get_logfile_name, read_lines
from .report import SummaryFormat, report, report_dates, report_table
from .utils import parse_date, parse_duration, parse_time

logger = logging.getLogger(__name__)

SUBCOMMANDS = ("add", "report", "list", "edit", "resume", "is-active", "validate")
LOG_LEVEL_CHOICES = ["NONE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
# global options that take a value, needed to find the subcommand in argv
GLOBAL_OPTIONS_WITH_VALUE = ("--config", "--log-level", "--console-log-level", "--log-file")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="tt",
        description="Track how a day is spent from a plain-text activity log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subcommands:
  add        Log the start of an activity (default when an activity is given)
  report     Summarize a day or a week (default without arguments)
  list       Show the activities file
  edit       Open a log file or the activities file in $EDITOR
  resume     Log an earlier activity of the day again
  is-active  Exit code 0 if an activity is running, 1 otherwise
  validate   Validate configuration file

Examples:
  # Start working on an activity from the activities file
  %(prog)s mail

  # Start a new activity with shortname "rev" and a tag
  %(prog)s +PROJ-12 =rev review

  # The current activity really started 10 minutes ago
  %(prog)s add --really --ago 10

  # Report on yesterday, and on the whole week as table
  %(prog)s -y
  %(prog)s report --week
        """,
    )

    # Global options (available for all subcommands)
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=Path,
        help="Path to configuration file (default: ~/.tt/config.toml)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set logging level (default: from config, DEBUG)",
    )
    parser.add_argument(
        "--console-log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set console logging level (default: from config, ERROR)",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        type=Path,
        help="Log file path (default: tt.json.log in the user log directory)",
    )
    parser.add_argument(
        "--no-log-json",
        action="store_true",
        help="Do not output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Subcommand to run")

    # ===== ADD subcommand =====
    add_parser = subparsers.add_parser(
        "add",
        help="Log the start of an activity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Known activity or shortname
  %(prog)s mail

  # Unknown activity, registered with shortname "rev"
  %(prog)s +PROJ-12 =rev

  # Started at 09:15 / 20 minutes ago
  %(prog)s --time 09:15 meeting
  %(prog)s --ago 20 meeting

  # Correct the open entry
  %(prog)s --really standup
  %(prog)s --really --time 09:05
        """,
    )
    add_parser.add_argument(
        "-r",
        "--really",
        action="store_true",
        help="Correct the activity or the start time of the currently open entry",
    )
    add_parser.add_argument(
        "-t",
        "--time",
        metavar="HH:MM",
        type=parse_time,
        help="The time the activity started (default: now)",
    )
    add_parser.add_argument(
        "-a",
        "--ago",
        metavar="MINUTES",
        type=int,
        default=0,
        help="The activity started this many minutes ago (or before --time)",
    )
    add_parser.add_argument("activity", nargs="?", help="Activity, shortname or +new-activity")
    add_parser.add_argument("tags", nargs="*", help="Tags; =name sets a shortname")

    # ===== REPORT subcommand =====
    report_parser = subparsers.add_parser(
        "report",
        help="Summarize a day or a week",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --date yesterday --format tickets
  %(prog)s --week --cutoff 00:15
        """,
    )
    report_parser.add_argument(
        "-f",
        "--format",
        choices=[f.value for f in SummaryFormat],
        help="Output format (default: from config, long)",
    )
    report_parser.add_argument(
        "-d",
        "--date",
        type=parse_date,
        help='Day to report on, e.g. "2025-01-01" or "3 days ago" (default: today)',
    )
    report_parser.add_argument(
        "-y", "--yesterday", action="store_true", help="Report on the day before"
    )
    report_parser.add_argument(
        "-w",
        "--week",
        action="store_true",
        help="Report on every day of the week up to the selected day (default format: table)",
    )
    report_parser.add_argument(
        "-c",
        "--cutoff",
        metavar="HH:MM",
        type=parse_duration,
        help="Distribute activities shorter than this to the others",
    )
    report_parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Report distributable activities in the table instead of distributing them",
    )

    # ===== LIST subcommand =====
    subparsers.add_parser("list", help="Show the activities file")

    # ===== EDIT subcommand =====
    edit_parser = subparsers.add_parser("edit", help="Open a log file or the activities file")
    edit_parser.add_argument(
        "-d", "--date", type=parse_date, help="Edit the log of this day (default: today)"
    )
    edit_parser.add_argument(
        "-y", "--yesterday", action="store_true", help="Edit the log of the day before"
    )
    edit_parser.add_argument(
        "-a", "--activities", action="store_true", help="Edit the activities file"
    )

    # ===== RESUME subcommand =====
    resume_parser = subparsers.add_parser(
        "resume",
        help="Log an earlier activity of the day again",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Back to what was done before the current activity
  %(prog)s

  # Resuming again goes further back
  %(prog)s 1
        """,
    )
    resume_parser.add_argument(
        "-r",
        "--really",
        action="store_true",
        help="Replace the current activity instead of starting a new entry",
    )
    resume_parser.add_argument(
        "-t", "--time", metavar="HH:MM", type=parse_time, help="Resume at this time"
    )
    resume_parser.add_argument(
        "n", nargs="?", type=int, default=0, help="Position in the resume stack (default: 0)"
    )

    # ===== IS-ACTIVE subcommand =====
    subparsers.add_parser("is-active", help="Exit code 0 if an activity is running, 1 otherwise")

    # ===== VALIDATE subcommand =====
    subparsers.add_parser("validate", help="Validate configuration file")

    return parser


def insert_default_subcommand(argv: list[str]) -> list[str]:
    """
    Insert the implicit subcommand into argv.

    "tt" and "tt -y" become report, "tt <activity> ..." becomes add.
    """
    pos = 0
    while pos < len(argv):
        arg = argv[pos]
        if arg in GLOBAL_OPTIONS_WITH_VALUE:
            pos += 2
        elif arg.startswith("--") and ("=" in arg or arg == "--no-log-json"):
            pos += 1
        else:
            break
    rest = argv[pos:]
    if rest and rest[0] in ("-h", "--help"):
        return argv
    if not rest or rest[0].startswith("-"):
        return argv[:pos] + ["report"] + rest
    if rest[0] not in SUBCOMMANDS:
        return argv[:pos] + ["add"] + rest
    return argv


def configure_logging(args: argparse.Namespace, subcommand: str) -> None:
    """
    Configure logging based on command-line arguments and config.

    Args:
        args: Parsed command-line arguments
        subcommand: The subcommand being executed
    """
    logging_config = config_module.config.get("logging", {})
    log_level = getattr(logging, args.log_level or logging_config.get("level", "DEBUG"), 0)
    console_log_level = getattr(
        logging, args.console_log_level or logging_config.get("console_level", "ERROR"), 0
    )

    # Determine log file
    log_file = None
    if args.log_file and log_level > 0:
        log_file = args.log_file  # Explicit log file
    elif log_level > 0:
        log_file = get_default_log_file(not args.no_log_json)  # Default log file

    # Build run mode info for structured logging (allows filtering logs)
    run_mode = {
        "subcommand": subcommand,
        "really": getattr(args, "really", False),
    }

    setup_logging(
        json_format=not args.no_log_json,
        log_level=log_level,
        console_log_level=console_log_level,
        log_file=log_file,
        run_mode=run_mode,
    )


def validate_add_args(args: argparse.Namespace) -> str | None:
    """Validate arguments for add subcommand."""
    if args.ago < 0:
        return "Error: --ago must not be negative"
    return None


def validate_report_args(args: argparse.Namespace) -> str | None:
    """Validate arguments for report subcommand."""
    if args.date and args.yesterday:
        return "Error: --date and --yesterday cannot be combined"
    return None


def validate_edit_args(args: argparse.Namespace) -> str | None:
    """Validate arguments for edit subcommand."""
    if args.activities and (args.date or args.yesterday):
        return "Error: --activities cannot be combined with --date or --yesterday"
    return None


def validate_resume_args(args: argparse.Namespace) -> str | None:
    """Validate arguments for resume subcommand."""
    if args.n < 0:
        return "Error: the resume position must not be negative"
    return None


def _now() -> datetime:
    return datetime.now()


def run_add(args: argparse.Namespace) -> int:
    """Execute the add subcommand."""
    now = _now()
    logtime = now.time().replace(second=0, microsecond=0)
    block = block_from_args(args.really, args.activity, args.tags, args.time, args.ago, logtime)
    activities_file = get_activities_file_name()
    activity_map = read_activities(read_lines(activities_file))
    add_entry(
        block,
        activity_map,
        activities_file,
        get_logfile_name(now.date()),
        logtime,
        logtime,
        PrefixResolver.from_config(),
    )
    return 0


def run_report(args: argparse.Namespace) -> int:
    """Execute the report subcommand."""
    report_config = config_module.config.get("report", {})
    default_format = "table" if args.week else report_config.get("format", "long")
    try:
        summary_format = SummaryFormat(args.format or default_format)
    except ValueError as err:
        raise UsageError(f"invalid report.format in config: {default_format!r}") from err
    cutoff = args.cutoff
    if cutoff is None and report_config.get("cutoff"):
        try:
            cutoff = parse_duration(report_config["cutoff"])
        except (TypeError, ValueError) as err:
            raise UsageError(
                f"invalid report.cutoff in config: {report_config['cutoff']!r}, expected HH:MM"
            ) from err
    distribute_all = args.all or report_config.get("all", False)
    resolver = PrefixResolver.from_config()

    results = []
    for day, closing_time in report_dates(_now(), args.date, args.yesterday, args.week):
        logfile = get_logfile_name(day)
        try:
            collected = collect_blocks(read_lines(logfile), closing_time, resolver)
        except TTError as err:
            err.with_context(f"reading {logfile}")
            raise
        results.append((day, collected))

    if summary_format == SummaryFormat.TABLE:
        summaries = [(day, collected.summary) for day, collected in results if collected]
        activity_map = read_activities(read_lines(get_activities_file_name()))
        for line in report_table(summaries, cutoff, distribute_all, activity_map):
            user_output(line)
        return 0

    for day, collected in results:
        if args.week:
            user_output(f"{day}:\n", attrs=["bold"])
        report(collected, summary_format, cutoff)
    return 0


def run_list(args: argparse.Namespace) -> int:
    """Execute the list subcommand."""
    list_activities(get_activities_file_name())
    return 0


def run_edit(args: argparse.Namespace) -> int:
    """Execute the edit subcommand."""
    if args.activities:
        return edit(get_activities_file_name())
    day, _closing_time = report_dates(_now(), args.date, args.yesterday)[0]
    return edit(get_logfile_name(day))


def run_resume(args: argparse.Namespace) -> int:
    """Execute the resume subcommand."""
    now = _now()
    logtime = now.time().replace(second=0, microsecond=0)
    resume(
        get_activities_file_name(),
        get_logfile_name(now.date()),
        logtime,
        args.time,
        args.n,
        args.really,
        PrefixResolver.from_config(),
    )
    return 0


def run_is_active(args: argparse.Namespace) -> int:
    """Execute the is-active subcommand."""
    now = _now()
    lines = read_lines(get_logfile_name(now.date()))
    active = is_active(now.time().replace(microsecond=0), lines, PrefixResolver.from_config())
    return 0 if active else 1


def run_validate(args: argparse.Namespace) -> int:
    """Execute the validate subcommand."""
    errors, warnings = validate_config(config_module.config)
    for warning in warnings:
        print(f"  warning: {warning}")
    if errors:
        print("Configuration errors found:")
        for error in errors:
            print(f"  - {error}")
        return 1
    print("Configuration is valid")
    return 0


COMMANDS = {
    "add": (validate_add_args, run_add),
    "report": (validate_report_args, run_report),
    "list": (None, run_list),
    "edit": (validate_edit_args, run_edit),
    "resume": (validate_resume_args, run_resume),
    "is-active": (None, run_is_active),
    "validate": (None, run_validate),
}


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for failed checks, 2 for errors)
    """
    parser = create_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(insert_default_subcommand(argv))
    subcommand = args.subcommand

    # Validate config file if specified
    if args.config:
        try:
            load_custom_config(args.config)
        except FileNotFoundError as err:
            print(f"Error: {err}", file=sys.stderr)
            return 1

    # Configure logging based on arguments
    configure_logging(args, subcommand)
    if subcommand != "validate":
        validate_and_warn(config_module.config)

    validate_args, run = COMMANDS[subcommand]
    error = validate_args(args) if validate_args else None
    if error:
        print(error, file=sys.stderr)
        return 1

    try:
        return run(args)
    except TTError as err:
        logger.debug(f"{subcommand} failed: {err!r}")
        print(f"tt: {err}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nExiting...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
