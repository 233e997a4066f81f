"""Implementations of the tt subcommands that change or inspect the log.

The functions here take explicit paths and times, so they can be used (and
tested) without going through the command line parser.
"""

import logging
import os
import subprocess
from collections.abc import Iterable
from datetime import time
from pathlib import Path

from .activities import ActivityMap, read_activities, validate_activity
from .collector import collect_blocks
from .config import PrefixResolver
from .errors import LogIOError, TTError, UsageError
from .log_parser import (
    Block,
    BlockData,
    NormalBlock,
    PrefixExpander,
    ReallyBlock,
    is_break,
    is_distributable,
    parse_line,
    to_line,
)
from .output import user_output
from .paths import append_line, read_lines
from .report import SummaryFormat, report

logger = logging.getLogger(__name__)

RESUME_TAG = "resume:"


def add_entry(
    block: Block,
    activity_map: ActivityMap | None,
    activities_file: Path,
    logfile: Path,
    timestamp: time,
    now: time,
    resolver: PrefixExpander | None = None,
) -> str:
    """
    Write a block to the log file and print the short report of the day.

    If activity_map is given, the activity is validated against it first.

    Returns:
        The line that was written
    """
    resolver = resolver or PrefixResolver.from_config()
    if activity_map is not None:
        validate_activity(block, activity_map, activities_file, resolver)
    line = to_line(block, timestamp)
    user_output(line)
    try:
        append_line(logfile, line)
    except OSError as err:
        raise LogIOError(err).with_context(f"writing to {logfile}") from err
    logger.info(f"Added {line!r} to {logfile}", extra={"log_line": line, "logfile": logfile})

    # an entry with a manual start time in the future cannot be closed at `now`
    starts_later = isinstance(block, NormalBlock) and block.data.start > now
    collected = collect_blocks(read_lines(logfile), None if starts_later else now, resolver)
    report(collected, SummaryFormat.SHORT)
    return line


def is_active(now: time, lines: Iterable[str], resolver: PrefixExpander | None = None) -> bool:
    """Return whether something is logged and the last entry is not a break."""
    collected = collect_blocks(lines, now, resolver)
    return collected is not None and collected.final_activity != "break"


def _resume_offset(tags: list[str]) -> int:
    for tag in tags:
        if tag.startswith(RESUME_TAG):
            try:
                return max(int(tag[len(RESUME_TAG):]), 1)
            except ValueError:
                return 1
    return 1


def find_resume_activities(
    lines: Iterable[str], resolver: PrefixExpander | None = None
) -> list[tuple[str, list[str], int]]:
    """
    Build the resume stack: the activities before the current one, most recent first.

    Entries that were themselves resumed carry a "resume:<n>" tag pointing
    n entries back; the stack skips over the entries in between, so resuming
    repeatedly walks further into the past instead of toggling.

    Returns:
        List of (activity, tags, offset) where offset counts entries from the end

    Raises:
        ParseError: for the first malformed line
        LogIOError: if reading the lines fails
    """
    blocks: list[BlockData] = []
    try:
        for line in lines:
            block = parse_line(line, resolver)
            if isinstance(block, (NormalBlock, ReallyBlock)):
                blocks.append(block.data)
    except (OSError, UnicodeDecodeError) as err:
        raise LogIOError(err) from err

    size = len(blocks)
    result: list[tuple[str, list[str], int]] = []
    if size <= 1:
        return result

    pos = size - 1
    current_activity = blocks[pos].activity
    while True:
        block = blocks[pos]
        if block.activity != current_activity and not is_break(block.activity):
            result.append((block.activity, list(block.tags), size - pos))
            current_activity = block.activity
        offset = _resume_offset(block.tags)
        if pos < offset:
            break
        pos -= offset
    return result


def resume(
    activities_file: Path,
    logfile: Path,
    now: time,
    timestamp: time | None,
    n: int,
    really: bool,
    resolver: PrefixExpander | None = None,
) -> str | None:
    """
    Log the n-th activity of the resume stack again.

    Returns:
        The line that was written, or None if there was nothing to resume
    """
    try:
        resume_stack = find_resume_activities(read_lines(logfile), resolver)
    except TTError as err:
        err.with_context(f"reading {logfile}")
        raise
    if not resume_stack:
        user_output("Nothing to resume.")
        return None
    if not 0 <= n < len(resume_stack):
        raise UsageError(f"there are only {len(resume_stack)} activities to resume")

    activity, original_tags, offset = resume_stack[n]
    tags = [t for t in original_tags if not t.startswith(RESUME_TAG)]
    tags.append(f"{RESUME_TAG}{offset}")

    start = timestamp or now
    data = BlockData(
        start=start,
        activity=f"+{activity}",
        tags=tags,
        distribute=is_distributable(activity),
    )
    activity_map = read_activities(read_lines(activities_file))
    return add_entry(
        Block.from_data(data, really),
        activity_map,
        activities_file,
        logfile,
        start,
        now,
        resolver,
    )


def list_activities(activities_file: Path) -> None:
    for line in read_lines(activities_file):
        user_output(line.rstrip("\n"))


def edit(filename: Path) -> int:
    """Start the editor for the given file (uses the environment variable $EDITOR)."""
    editor = os.environ.get("EDITOR") or "vi"
    logger.debug(f"Running {editor} {filename}")
    try:
        result = subprocess.run([editor, str(filename)], check=False)
    except OSError as err:
        raise UsageError(f"could not start editor {editor!r}: {err}") from err
    return result.returncode
