"""Report generation for collected days.

Renders CollectResults in one of several formats:

- status:   one line for a status bar (current activity, since when, totals)
- short:    start, end, breaks, work time and distributable time
- long:     short plus one line per activity with its distributed share
- tickets:  the names of all activities of the day
- table:    a week table with one column per day (see report_table)
- activity: the current activity, by shortname if it has one
- ticket:   the current activity, never by shortname
- worktime: work time of the day in minutes
"""

from datetime import date, datetime, time, timedelta
from enum import Enum

from .activities import ActivityMap
from .collector import ActivityTotal, CollectResult, Summary
from .distribution import distribute, distributed_share
from .log_parser import is_break, is_distributable
from .output import user_output
from .utils import format_duration, format_time


class SummaryFormat(Enum):
    STATUS = "status"
    SHORT = "short"
    LONG = "long"
    TICKETS = "tickets"
    TABLE = "table"
    ACTIVITY = "activity"
    TICKET = "ticket"
    WORKTIME = "worktime"


def report_dates(
    now: datetime, day: date | None = None, yesterday: bool = False, week: bool = False
) -> list[tuple[date, time | None]]:
    """
    Return the days to report on, each with the time to close the day at.

    Only today is closed (at the current time), past days end where their log ends.
    With week, all days from monday up to the selected day are returned.
    """
    today = now.date()
    base = day or today
    if yesterday:
        base -= timedelta(days=1)
    offset = base.weekday() if week else 0
    first = base - timedelta(days=offset)
    closing = now.time().replace(microsecond=0)
    days = [first + timedelta(days=i) for i in range(offset + 1)]
    return [(d, closing if d == today else None) for d in days]


def _sort_key(item: tuple[str, ActivityTotal]) -> tuple[bool, bool, timedelta, str]:
    name, total = item
    return (is_break(name), is_distributable(name), -total.duration, name)


def short_report(summary: Summary) -> str:
    return (
        f"start: {format_time(summary.start)}, end: {format_time(summary.end)}, "
        f"breaks: {format_duration(summary.breaks)}, "
        f"work time: {format_duration(summary.work_time)}, "
        f"distribute: {format_duration(summary.distribute)}"
    )


def _tag_report(total: ActivityTotal) -> str:
    parts = []
    for tag, tag_duration in total.sorted_tags():
        if tag.startswith("resume:"):
            continue
        if tag.startswith("=") or tag_duration == total.duration:
            parts.append(tag)
        else:
            parts.append(f"{tag}({format_duration(tag_duration)})")
    return ", ".join(parts)


def long_report_lines(summary: Summary, cutoff: timedelta | None = None) -> list[tuple[str, str]]:
    """
    Return one (line, activity name) pair per activity of the day.

    Normal activities show their own time, their share of the distributed
    time and the sum. Breaks, distributable activities and activities below
    the cutoff only show their own time, in parentheses.
    """
    limit = cutoff if cutoff is not None else timedelta(0)
    lines = []
    for name, total in sorted(summary.activities.items(), key=_sort_key):
        duration = total.duration
        if is_distributable(name) or is_break(name) or duration < limit:
            line = f"- {name:16}({format_duration(duration)})"
        else:
            share = distributed_share(summary, duration, cutoff)
            line = (
                f"- {name:16} {format_duration(duration)} + {format_duration(share)}"
                f" = {format_duration(duration + share)}  {_tag_report(total)}"
            ).rstrip()
        lines.append((line, name))
    return lines


def status_line(result: CollectResult) -> str:
    summary = result.summary
    shortname = f" {result.final_shortname}" if result.final_shortname else ""
    current = summary.activities.get(result.final_activity)
    current_duration = current.duration if current else timedelta(0)
    return (
        f"{result.final_activity}{shortname} since {format_time(result.final_start)} "
        f"({format_duration(current_duration)}) wt: {format_duration(summary.work_time)} "
        f"dt: {format_duration(summary.distribute)}"
    )


def report_lines(
    result: CollectResult | None, format: SummaryFormat, cutoff: timedelta | None = None
) -> list[str]:
    """Render a collect result in the given format (table is handled by report_table)."""
    if result is None:
        return ["No activities found."]
    summary = result.summary
    if format == SummaryFormat.STATUS:
        return [status_line(result)]
    if format == SummaryFormat.TICKETS:
        return sorted(summary.activities)
    if format in (SummaryFormat.SHORT, SummaryFormat.LONG):
        lines = [short_report(summary)]
        if format == SummaryFormat.LONG:
            lines.extend(line for line, _activity in long_report_lines(summary, cutoff))
        return lines
    if format == SummaryFormat.ACTIVITY:
        return [result.final_shortname or result.final_activity]
    if format == SummaryFormat.TICKET:
        return [result.final_activity]
    if format == SummaryFormat.WORKTIME:
        return [str(int(summary.work_time.total_seconds() // 60))]
    return []


def report(
    result: CollectResult | None, format: SummaryFormat, cutoff: timedelta | None = None
) -> None:
    """Print a collect result in the given format."""
    for line in report_lines(result, format, cutoff):
        user_output(line)


def report_table(
    summaries: list[tuple[date, Summary]],
    cutoff: timedelta | None,
    all: bool,
    activity_map: ActivityMap,
) -> list[str]:
    """
    Render several days as a table, one column per day plus a total column.

    Layout::

                    2024-03-04 2024-03-05  total
        start            08:30      09:00
        end              17:00      16:45
        breaks            0:30       0:45
        worktime          8:00       7:00  15:00

        PROJ-12 =proj     3:10       2:00   5:10
    """
    durations: dict[str, dict[date, timedelta]] = {}
    for day, summary in summaries:
        for name, duration in distribute(summary, cutoff, all).items():
            durations.setdefault(name, {})[day] = duration

    names = sorted(durations)
    shortnames = {name: _shortname(activity_map, name) for name in names}
    activity_length = max((len(n) for n in names), default=0)
    shortname_length = max((len(s) + 2 for s in shortnames.values() if s), default=0)
    width = max(activity_length + shortname_length, len("worktime"))

    def row(col1: str, cells: list[str], total: str) -> str:
        return f"{col1:<{width}}" + "".join(f" {c:>10}" for c in cells) + f"  {total:>5}"

    total_worktime = sum((s.work_time for _d, s in summaries), timedelta(0))
    lines = [
        row("", [str(d) for d, _s in summaries], "total"),
        row("start", [format_time(s.start) for _d, s in summaries], ""),
        row("end", [format_time(s.end) for _d, s in summaries], ""),
        row("breaks", [format_duration(s.breaks) for _d, s in summaries], ""),
        row(
            "worktime",
            [format_duration(s.work_time) for _d, s in summaries],
            format_duration(total_worktime),
        ),
        "",
    ]
    for name in names:
        per_day = durations[name]
        label = name
        if shortnames[name]:
            label = f"{name:<{activity_length}} ={shortnames[name]}"
        cells = [
            format_duration(per_day[d]) if d in per_day else "-" for d, _s in summaries
        ]
        lines.append(row(label, cells, format_duration(sum(per_day.values(), timedelta(0)))))
    return [line.rstrip() for line in lines]


def _shortname(activity_map: ActivityMap, name: str) -> str | None:
    entry = activity_map.get(name)
    if entry is None:
        return None
    activity, tags = entry
    # activities point back to their shortname in the tags slot
    if activity == name and tags:
        return tags[0]
    return None
