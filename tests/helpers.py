"""
Helper utilities for building blocks and log files in tests.

Times are written as "HH:MM" strings, as in the log files:

    >>> normal("08:30", "email", "=mail")
    NormalBlock(data=BlockData(start=datetime.time(8, 30), activity='email', ...))
"""

from datetime import time
from pathlib import Path

from timetracker.log_parser import BlockData, NormalBlock, ReallyBlock, TimeCorrection


def t(s: str) -> time:
    """Shorthand for a time of day: t("08:30")."""
    hours, minutes = s.split(":")
    return time(int(hours), int(minutes))


def _data(start: str, activity: str, tags: tuple[str, ...]) -> BlockData:
    return BlockData(t(start), activity, list(tags), distribute=activity.startswith("_"))


def normal(start: str, activity: str, *tags: str) -> NormalBlock:
    return NormalBlock(_data(start, activity, tags))


def really(start: str, activity: str, *tags: str) -> ReallyBlock:
    return ReallyBlock(_data(start, activity, tags))


def correction(start: str) -> TimeCorrection:
    return TimeCorrection(t(start))


def write_lines(path: Path, *lines: str) -> Path:
    """Write a log or activities file, one line per argument."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path
