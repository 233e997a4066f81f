"""Redistribution of vague activity time onto the named activities of a day.

Time spent on distributable activities (names starting with "_") and on
activities below the cutoff is shared out among the remaining activities,
proportionally to their own durations. Breaks never take part.
"""

from datetime import timedelta

from .collector import ActivityTotal, Summary
from .log_parser import is_break, is_distributable


def cutoff_sum(activities: dict[str, ActivityTotal], cutoff: timedelta | None) -> timedelta:
    """Return the total of the normal activities with a duration below the cutoff."""
    if cutoff is None:
        return timedelta(0)
    return sum(
        (
            total.duration
            for name, total in activities.items()
            if not is_break(name) and not is_distributable(name) and total.duration < cutoff
        ),
        timedelta(0),
    )


def _share(pool_seconds: float, own: timedelta, denominator_seconds: float) -> timedelta:
    if denominator_seconds == 0:
        return timedelta(0)
    return timedelta(seconds=int(pool_seconds * (own.total_seconds() / denominator_seconds)))


def distributed_share(summary: Summary, duration: timedelta, cutoff: timedelta | None) -> timedelta:
    """Share of the distributable and cut-off time an activity of this duration receives."""
    cutoff_total = cutoff_sum(summary.activities, cutoff).total_seconds()
    pool = summary.distribute.total_seconds() + cutoff_total
    normal_time = summary.work_time - summary.distribute
    denominator = normal_time.total_seconds() - cutoff_total
    return _share(pool, duration, denominator)


def distribute(
    summary: Summary, cutoff: timedelta | None = None, all: bool = False
) -> dict[str, timedelta]:
    """
    Compute the adjusted duration of every reported activity.

    Args:
        summary: The finished summary of a day
        cutoff: Activities shorter than this are folded into the distribution pool
        all: If True, distributable activities are reported on their own and
            only the cut-off time is distributed

    Returns:
        Mapping of activity name to its duration plus its share, truncated to
        whole seconds. Breaks, cut-off activities and (unless all is set)
        distributable activities are not part of the mapping.
    """
    cutoff_total = cutoff_sum(summary.activities, cutoff).total_seconds()
    limit = cutoff if cutoff is not None else timedelta(0)
    pool = cutoff_total if all else cutoff_total + summary.distribute.total_seconds()
    normal_time = summary.work_time - summary.distribute
    denominator = normal_time.total_seconds() - cutoff_total

    result = {}
    for name, total in summary.activities.items():
        if is_break(name) or (not all and is_distributable(name)) or total.duration < limit:
            continue
        adjusted = total.duration + _share(pool, total.duration, denominator)
        result[name] = timedelta(seconds=int(adjusted.total_seconds()))
    return result
