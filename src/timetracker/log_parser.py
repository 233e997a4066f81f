"""Parsing and writing of activity log lines.

A log line looks like one of::

    08:30 email =mail some-tag         # activity "email" starts at 08:30
    09:10 08:55 meeting                # logged at 09:10, started at 08:55
    09:12 really standup               # the open activity was really "standup"
    09:15 really 09:05                 # the open activity really started at 09:05
    # a comment

Each line becomes one Block.
"""

import logging
from dataclasses import dataclass, field
from datetime import time
from typing import Protocol

from .errors import ParseError
from .utils import format_time, parse_time

logger = logging.getLogger(__name__)

REALLY = "really"


class PrefixExpander(Protocol):
    """Expands bare ticket numbers into full activity names."""

    def resolve(self, activity: str) -> str: ...


def is_distributable(activity: str) -> bool:
    """Return whether the time of this activity is shared out among the other activities."""
    return activity.startswith("_")


def is_break(activity: str) -> bool:
    """Return whether this activity is a break or the end of the day."""
    return activity in ("break", "end")


def is_start(activity: str) -> bool:
    """Return whether this activity is the start of something yet unknown."""
    return activity in ("start", "_start")


@dataclass
class BlockData:
    start: time
    activity: str
    tags: list[str] = field(default_factory=list)
    distribute: bool = False

    @property
    def shortname(self) -> str | None:
        """The first tag starting with '=', if any."""
        return next((t for t in self.tags if t.startswith("=")), None)


class Block:
    """Base class of all parsed log entries."""

    @staticmethod
    def from_data(data: BlockData, really: bool) -> "Block":
        return ReallyBlock(data) if really else NormalBlock(data)


@dataclass
class NormalBlock(Block):
    """Activity data.activity begins at data.start and runs until the next block."""

    data: BlockData


@dataclass
class ReallyBlock(Block):
    """Replaces activity and tags of the open block, keeping its start time."""

    data: BlockData


@dataclass
class TimeCorrection(Block):
    """Replaces the start time of the open block."""

    time: time


@dataclass
class CommentBlock(Block):
    """Empty lines and comments."""


def _next_word(words, message: str, line: str) -> str:
    try:
        return next(words)
    except StopIteration:
        raise ParseError(message, line) from None


def _try_parse_time(word: str) -> time | None:
    try:
        return parse_time(word)
    except ValueError:
        return None


def parse_line(line: str, resolver: PrefixExpander | None = None) -> Block:
    """
    Parse one log line into a Block.

    Args:
        line: The raw line (a trailing newline is allowed)
        resolver: Optional prefix expander for bare numeric activities

    Returns:
        NormalBlock, ReallyBlock, TimeCorrection or CommentBlock

    Raises:
        ParseError: if the line is malformed. The error carries the line.
    """
    line = line.rstrip("\r\n")
    words = iter(line.split())

    first = next(words, None)
    if first is None or first.startswith("#"):
        return CommentBlock()

    start = _try_parse_time(first)
    if start is None:
        raise ParseError("cannot parse start time", line)

    word = _next_word(words, "Line does not contain at least 2 words", line)
    if word.startswith("#"):
        return CommentBlock()

    really = word == REALLY
    if really:
        word = _next_word(words, "really block does not contain an activity", line)

    manual_time = _try_parse_time(word)
    if manual_time is not None:
        if really:
            if next(words, None) is not None:
                raise ParseError(
                    "time correction cannot have further data, i.e. use only <time> really <time>",
                    line,
                )
            return TimeCorrection(manual_time)
        start = manual_time
        word = _next_word(words, "really block does not contain an activity", line)

    activity = resolver.resolve(word) if resolver is not None else word
    data = BlockData(
        start=start,
        activity=activity,
        tags=list(words),
        distribute=is_distributable(word),
    )
    return Block.from_data(data, really)


def to_line(block: Block, timestamp: time) -> str:
    """
    Turn a block into a log file line (without trailing newline).

    timestamp is the time the line is written; the block's own start time is
    only written when it differs from it.
    """
    if isinstance(block, (NormalBlock, ReallyBlock)):
        data = block.data
        words = [format_time(timestamp)]
        if isinstance(block, ReallyBlock):
            words.append(REALLY)
        if data.start != timestamp:
            words.append(format_time(data.start))
        words.append(data.activity)
        words.extend(data.tags)
        return " ".join(words)
    if isinstance(block, TimeCorrection):
        return f"{format_time(timestamp)} {REALLY} {format_time(block.time)}"
    return ""


def parse_lines(lines, resolver: PrefixExpander | None = None):
    """Lazily parse an iterable of lines, yielding (line, block) pairs."""
    for line in lines:
        block = parse_line(line, resolver)
        if isinstance(block, CommentBlock):
            logger.debug(f"Skipping comment line {line.rstrip()!r}")
        yield line, block
