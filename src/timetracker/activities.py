"""The activities file and validation of new log entries.

The activities file lists the known activities, one per line::

    <shortname> <activity> [tags...]
    <activity>

Adding an entry for an unknown activity requires a leading "+" ("tt +new-thing");
a "=name" tag on such an entry registers "name" as shortname in the activities file.
"""

import logging
from collections.abc import Iterable
from datetime import time, timedelta
from pathlib import Path

from .errors import ActivityConfigError, UsageError
from .log_parser import (
    Block,
    BlockData,
    NormalBlock,
    PrefixExpander,
    ReallyBlock,
    TimeCorrection,
    is_break,
    is_distributable,
    is_start,
)
from .output import user_output
from .paths import append_line
from .utils import shift_time

logger = logging.getLogger(__name__)

# name or shortname -> (activity, tags)
ActivityMap = dict[str, tuple[str, list[str]]]


def is_shortname(tag: str) -> bool:
    return tag.startswith("=")


def shortname_from_tag(tag: str) -> str | None:
    return tag[1:] if is_shortname(tag) else None


def read_activities(lines: Iterable[str]) -> ActivityMap:
    """
    Read the activities file.

    A "<shortname> <activity> tags..." line maps the shortname to the activity
    and its tags, and the activity to itself with the shortname as back link
    (unless the activity has an entry of its own already).

    Raises:
        ActivityConfigError: for a line starting with a "+" or "=" word
    """
    activity_map: ActivityMap = {}
    for line in lines:
        words = line.split()
        if not words or words[0].startswith("#"):
            continue
        if words[0][0] in "+=":
            raise ActivityConfigError(
                "activity lines must be <shortname> <activity> [tags] or <activity>"
            ).with_context(f"reading activity line {line.strip()!r}")
        if len(words) == 1:
            activity_map[words[0]] = (words[0], [])
            continue
        shortname, activity, *tags = words
        activity_map[shortname] = (activity, tags)
        backlink = [] if activity in activity_map else [shortname]
        activity_map[activity] = (activity, backlink)
    return activity_map


def _needs_lookup(activity: str) -> bool:
    return not is_distributable(activity) and not is_break(activity) and not is_start(activity)


def validate_activity(
    block: Block,
    activity_map: ActivityMap,
    activities_file: Path,
    resolver: PrefixExpander,
) -> None:
    """
    Validate the activity of a new entry and resolve shortnames, in place.

    - a leading "+" forces the activity, even if not in the activities file;
      a "=shortname" tag then adds a line to the activities file
    - bare numbers get the configured prefix
    - known shortnames are replaced by their activity, with a "=shortname" tag
      in front and the tags from the activities file appended; a known activity
      given by its own name gets the shortname of its back link appended as tag

    Raises:
        UsageError: if the activity is not known and was not forced with "+"
    """
    if not isinstance(block, (NormalBlock, ReallyBlock)):
        return
    data = block.data

    if data.activity.startswith("+"):
        data.activity = resolver.resolve(data.activity[1:])
        data.distribute = is_distributable(data.activity)
        if _needs_lookup(data.activity):
            _register_shortname(data, activity_map, activities_file)
        return

    if not _needs_lookup(data.activity):
        return

    activity = resolver.resolve(data.activity)
    if activity not in activity_map:
        # every activity in the file is also a key, so this one is unknown
        raise UsageError("activity not known, you can add it using the prefix '+'").with_context(
            f"validating activity {activity!r}"
        )
    found_activity, found_tags = activity_map[activity]
    data.activity = found_activity
    if activity != found_activity:
        data.tags.insert(0, f"={activity}")
    # for the activity itself, found_tags is the back link to its shortname
    data.tags.extend(found_tags)
    data.distribute = is_distributable(data.activity)


def _register_shortname(data: BlockData, activity_map: ActivityMap, activities_file: Path) -> None:
    shortname = next(filter(None, map(shortname_from_tag, data.tags)), None)
    if shortname is None:
        return
    found = activity_map.get(shortname)
    if found is not None and found[0] == data.activity:
        return
    other_tags = [t for t in data.tags if not is_shortname(t)]
    line = " ".join([shortname, data.activity, *other_tags])
    append_line(activities_file, line)
    activity_map[shortname] = (data.activity, other_tags)
    logger.info(f"Added {line!r} to {activities_file}", extra={"activity": data.activity})
    user_output(f"Added to activitiesfile: {line}")


def block_from_args(
    really: bool,
    activity: str | None,
    tags: list[str],
    timestamp: time | None,
    ago: int,
    logtime: time,
) -> Block:
    """
    Turn the options of "tt add" into the block to log.

    Args:
        really: Correct the activity or start time of the open entry
        activity: The activity (None for a pure time correction)
        tags: Additional tags
        timestamp: Manual time, used instead of logtime
        ago: The activity started this many minutes before (logtime or timestamp)
        logtime: The current time

    Raises:
        UsageError: for combinations that do not make sense
    """

    def minus_ago(t: time) -> time:
        try:
            return shift_time(t, -timedelta(minutes=ago))
        except ValueError as err:
            raise UsageError(f"--ago {ago} goes back before midnight") from err

    if really:
        if activity is None and not tags and timestamp is not None:
            return TimeCorrection(minus_ago(timestamp))
        if activity is None and not tags and timestamp is None and ago > 0:
            return TimeCorrection(minus_ago(logtime))
        if activity is not None and timestamp is None and ago == 0:
            return ReallyBlock(
                BlockData(logtime, activity, list(tags), is_distributable(activity))
            )
        raise UsageError(
            "really either needs an activity or a manual timestamp (which includes using --ago)"
        )
    if activity is None:
        raise UsageError("please provide an activity.")
    start = minus_ago(timestamp if timestamp is not None else logtime)
    return NormalBlock(BlockData(start, activity, list(tags), is_distributable(activity)))
