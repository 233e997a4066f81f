"""Locations of the log files, the activities file and the config file.

Everything lives in ~/.tt unless the TT_DIR environment variable points
somewhere else. One log file is kept per day, named after the date.
"""

import os
from collections.abc import Iterator
from datetime import date
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "tt"


def get_tt_dir() -> Path:
    tt_dir = os.environ.get("TT_DIR")
    if tt_dir:
        return Path(tt_dir)
    return Path.home() / ".tt"


def get_logfile_name(day: date) -> Path:
    return get_tt_dir() / day.strftime("%Y-%m-%d")


def get_activities_file_name() -> Path:
    return get_tt_dir() / "activities"


def get_configfile_name() -> Path:
    return get_tt_dir() / "config.toml"


def get_default_log_file(json: bool) -> Path:
    """Return the path of the diagnostic log file in the user's log directory."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=False)
    log_dir = Path(dirs.user_log_path)
    log_dir.mkdir(parents=True, exist_ok=True)
    json_postfix = ".json" if json else ""
    return log_dir / f"tt{json_postfix}.log"


def read_lines(path: Path) -> Iterator[str]:
    """Yield the lines of a file; a missing file reads as empty."""
    try:
        f = open(path, encoding="utf-8")
    except FileNotFoundError:
        return
    with f:
        yield from f


def append_line(path: Path, line: str) -> None:
    """Append one line to a file, creating the file and its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(line + "\n")
