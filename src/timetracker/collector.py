"""Accumulation of parsed log blocks into a daily summary.

BlockCollector consumes Blocks in log order and keeps:

- the summary of everything that has already ended,
- the block that is still open (its end is the start of the next block),
- the block that ended last, because a TimeCorrection moves the boundary
  between that block and the open one and therefore changes its totals.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import time, timedelta

from .errors import CollectorFinalizedError, LogIOError, ValidationError
from .log_parser import (
    Block,
    BlockData,
    CommentBlock,
    NormalBlock,
    PrefixExpander,
    ReallyBlock,
    TimeCorrection,
    is_break,
    parse_lines,
    to_line,
)
from .utils import format_time, time_diff

logger = logging.getLogger(__name__)


@dataclass
class ActivityTotal:
    """Accumulated time of one activity, in total and per tag."""

    duration: timedelta = field(default_factory=timedelta)
    tags: dict[str, timedelta] = field(default_factory=dict)

    def add(self, duration: timedelta, tags: Iterable[str] = ()) -> None:
        self.duration += duration
        for tag in dict.fromkeys(tags):
            self.tags[tag] = self.tags.get(tag, timedelta(0)) + duration

    def shift(self, diff: timedelta) -> None:
        """Move the total and every tag total by diff (used by time corrections)."""
        self.duration += diff
        for tag in self.tags:
            self.tags[tag] += diff

    def sorted_tags(self) -> list[tuple[str, timedelta]]:
        return sorted(self.tags.items())


@dataclass
class Summary:
    """Totals for one day of logging."""

    start: time
    end: time
    breaks: timedelta = field(default_factory=timedelta)
    # includes the distributable time
    work_time: timedelta = field(default_factory=timedelta)
    distribute: timedelta = field(default_factory=timedelta)
    activities: dict[str, ActivityTotal] = field(default_factory=dict)

    def add_time(self, data: BlockData, duration: timedelta) -> None:
        """Account duration to the totals of the block described by data."""
        if is_break(data.activity):
            self.breaks += duration
        else:
            self.work_time += duration
        if data.distribute:
            self.distribute += duration


@dataclass
class CollectResult:
    summary: Summary
    final_activity: str
    final_shortname: str | None
    final_start: time


@dataclass
class _Empty:
    """No block has been opened yet."""


@dataclass
class _Open:
    summary: Summary
    current: BlockData
    previous: BlockData | None = None


@dataclass
class _Finalized:
    """finalize() has been called; the collector cannot be used anymore."""


class BlockCollector:
    """
    Consumes Blocks and builds up a summary that can be used for a report.

    Usage:
        >>> collector = BlockCollector()
        >>> collector.add(NormalBlock(BlockData(time(8, 30), "email")))
        >>> collector.add(NormalBlock(BlockData(time(9, 15), "break")))
        >>> result = collector.finalize()
        >>> result.summary.work_time
        datetime.timedelta(seconds=2700)
    """

    def __init__(self) -> None:
        self._state: _Empty | _Open | _Finalized = _Empty()

    @property
    def is_empty(self) -> bool:
        return isinstance(self._state, _Empty)

    def add(self, block: Block, line: str | None = None) -> None:
        """
        Add the next block of the log.

        Args:
            block: The parsed block
            line: The log line the block came from, used in error messages

        Raises:
            ValidationError: if a block starts before the currently open one, or a
                time correction goes back before the start of the previous one
            CollectorFinalizedError: if finalize() was already called
        """
        state = self._state
        if isinstance(state, _Finalized):
            raise CollectorFinalizedError("collector has already been finalized")

        if isinstance(block, CommentBlock):
            return

        if isinstance(state, _Empty):
            if isinstance(block, NormalBlock):
                self._open(block.data)
            else:
                logger.debug(f"Ignoring {type(block).__name__} before the first activity")
            return

        if isinstance(block, TimeCorrection):
            self._correct_time(state, block, line)
        elif isinstance(block, ReallyBlock):
            state.current = BlockData(
                start=state.current.start,
                activity=block.data.activity,
                tags=list(block.data.tags),
                distribute=block.data.distribute,
            )
        elif isinstance(block, NormalBlock):
            self._close_current(state, block.data, line)

    def _open(self, data: BlockData) -> None:
        self._state = _Open(summary=Summary(start=data.start, end=data.start), current=data)

    def _correct_time(self, state: _Open, block: TimeCorrection, line: str | None) -> None:
        real_start = block.time
        before = state.previous
        if before is not None and real_start < before.start:
            raise ValidationError(
                f"corrected time is before the start of the previous block "
                f"({format_time(before.start)})",
                line.rstrip("\r\n") if line is not None else to_line(block, real_start),
            )
        # positive diff: the previous block ended later than logged
        diff = time_diff(real_start, state.current.start)
        state.current.start = real_start
        state.summary.end = real_start
        if before is None:
            state.summary.start = real_start
            return
        # the entry exists, it was created when `before` was closed
        state.summary.activities[before.activity].shift(diff)
        state.summary.add_time(before, diff)

    def _close_current(self, state: _Open, new: BlockData, line: str | None) -> None:
        current = state.current
        if new.start < current.start:
            raise ValidationError(
                f"start time is before the start of the open block ({format_time(current.start)})",
                line.rstrip("\r\n") if line is not None else to_line(NormalBlock(new), new.start),
            )
        duration = time_diff(new.start, current.start)
        summary = state.summary
        summary.end = new.start
        summary.add_time(current, duration)
        summary.activities.setdefault(current.activity, ActivityTotal()).add(
            duration, current.tags
        )
        state.previous = current
        state.current = new

    def finalize(self, closing_time: time | None = None) -> CollectResult | None:
        """
        Finish the collection and return the result.

        If closing_time is given, the open activity is ended at that time by a
        synthetic "break" block, so its duration is part of the totals.

        Returns:
            None if no block was ever opened, else the CollectResult
        """
        state = self._state
        if isinstance(state, _Finalized):
            raise CollectorFinalizedError("collector has already been finalized")
        if isinstance(state, _Empty):
            self._state = _Finalized()
            return None

        current = state.current
        final_activity, final_shortname, final_start = (
            current.activity,
            current.shortname,
            current.start,
        )
        if closing_time is not None:
            self.add(NormalBlock(BlockData(start=closing_time, activity="break")))
        self._state = _Finalized()
        return CollectResult(
            summary=state.summary,
            final_activity=final_activity,
            final_shortname=final_shortname,
            final_start=final_start,
        )


def collect_blocks(
    lines: Iterable[str],
    add_ending_at: time | None = None,
    resolver: PrefixExpander | None = None,
) -> CollectResult | None:
    """
    Parse the lines, collect the blocks and finalize.

    Stops at the first malformed line; no partial result is returned.

    Raises:
        ParseError: for the first malformed line
        ValidationError: for the first line that goes back in time
        LogIOError: if reading the lines fails
    """
    collector = BlockCollector()
    try:
        for line, block in parse_lines(lines, resolver):
            collector.add(block, line)
    except (OSError, UnicodeDecodeError) as err:
        raise LogIOError(err) from err
    return collector.finalize(add_ending_at)
