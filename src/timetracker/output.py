"""Logging and output utilities for tt."""

import json
import logging
import sys
from datetime import UTC, datetime, time, timedelta

from termcolor import colored, cprint

# extra fields picked up from log records, e.g.
# logger.info("added", extra={"activity": "email", "block_start": time(8, 30)})
CONTEXT_FIELDS = ("activity", "block_start", "duration", "log_line", "logfile")

# (color, attrs) per level; levels not listed are printed plain
LEVEL_STYLES = {
    logging.CRITICAL: ("red", ["bold", "blink"]),
    logging.ERROR: ("red", ["bold"]),
    logging.WARNING: (None, ["bold"]),
    logging.INFO: ("yellow", None),
}


def _context_value(val) -> str:
    if isinstance(val, (datetime, time)):
        return val.isoformat()
    if isinstance(val, timedelta):
        return f"{val.total_seconds():.0f}s"
    return str(val)


class StructuredFormatter(logging.Formatter):
    """
    Formats a record with the tt context fields, as JSON for the log file
    or as a single human readable line for the console.
    """

    def __init__(self, use_json: bool = False, run_mode: dict = None) -> None:
        super().__init__()
        self.use_json = use_json
        self.run_mode = run_mode or {}

    def record_data(self, record: logging.LogRecord) -> dict:
        data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if self.run_mode:
            data["run_mode"] = self.run_mode
        data.update(
            (key, _context_value(getattr(record, key)))
            for key in CONTEXT_FIELDS
            if hasattr(record, key)
        )
        return data

    def format(self, record: logging.LogRecord) -> str:
        data = self.record_data(record)
        if self.use_json:
            return json.dumps(data)
        details = "".join(
            f" ({label}: {data[key]})"
            for key, label in (("activity", "activity"), ("log_line", "line"))
            if key in data
        )
        clock = datetime.now().strftime("%H:%M:%S")
        return f"{clock} {data['level']}: {data['message']}{details}"


class ColoredConsoleHandler(logging.StreamHandler):
    """Stream handler that styles each line after its log level."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        style = next(
            (style for level, style in LEVEL_STYLES.items() if record.levelno >= level), None
        )
        if style is None:
            return msg
        color, attrs = style
        return colored(msg, color=color, attrs=attrs)


def setup_logging(
    json_format: bool = False,
    log_level: int = logging.DEBUG,
    console_log_level: int = logging.ERROR,
    log_file: str = None,
    run_mode: dict = None,
) -> None:
    """
    Set up the logging system.

    Args:
        json_format: If True, write the log file in JSON format
        log_level: Level for the log file, 0 disables it (default: DEBUG)
        console_log_level: Level for stderr, 0 disables it (default: ERROR)
        log_file: Optional file path to write logs to
        run_mode: Optional dict with run mode info (subcommand etc.) for filtering logs
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = []
    if log_file and log_level:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(StructuredFormatter(use_json=json_format, run_mode=run_mode))
        handlers.append(file_handler)
    if console_log_level:
        console_handler = ColoredConsoleHandler(sys.stderr)
        console_handler.setLevel(console_log_level)
        console_handler.setFormatter(StructuredFormatter(run_mode=run_mode))
        handlers.append(console_handler)

    for handler in handlers:
        root_logger.addHandler(handler)
    if handlers:
        root_logger.setLevel(min(handler.level for handler in handlers))
    else:
        root_logger.setLevel(logging.CRITICAL + 1)


def user_output(msg: str, color: str = None, attrs: list = None) -> None:
    """Print program output (as opposed to diagnostics, which go to logging)."""
    if color or attrs:
        cprint(msg, color=color, attrs=attrs)
    else:
        print(msg)


# reconfigured by the CLI from the config and the command line
setup_logging(log_file=None)
