"""Shared utility functions for time and duration handling."""

from datetime import date, datetime, time, timedelta

import dateparser

TIME_FORMAT = "%H:%M"

# any fixed day works, only the time of day matters
_REFERENCE_DATE = date(2000, 1, 1)


def parse_time(s: str) -> time:
    """
    Parse a wall-clock time written as HH:MM (24h).

    Single digit hours and minutes are accepted ("8:30").

    Raises:
        ValueError: if the string is not a valid time
    """
    return datetime.strptime(s, TIME_FORMAT).time()


def format_time(t: time) -> str:
    """Format a time as HH:MM."""
    return t.strftime(TIME_FORMAT)


def parse_duration(s: str) -> timedelta:
    """Parse a duration written as HH:MM, e.g. "01:54" -> 1h54m."""
    t = parse_time(s)
    return timedelta(hours=t.hour, minutes=t.minute)


def format_duration(duration: timedelta) -> str:
    """Format a duration as H:MM, rounded to the nearest minute."""
    mins = (int(duration.total_seconds()) + 30) // 60
    hours = mins // 60
    return f"{hours}:{mins - hours * 60:02d}"


def time_diff(later: time, earlier: time) -> timedelta:
    """Signed difference between two times on the same day."""
    return datetime.combine(_REFERENCE_DATE, later) - datetime.combine(_REFERENCE_DATE, earlier)


def shift_time(t: time, delta: timedelta) -> time:
    """Move a wall-clock time by delta, staying within the day."""
    shifted = datetime.combine(_REFERENCE_DATE, t) + delta
    if shifted.date() != _REFERENCE_DATE:
        raise ValueError(f"{format_time(t)} shifted by {delta} leaves the day")
    return shifted.time()


def parse_date(date_string: str) -> date:
    """
    Parse a date string in various formats.

    Supports:
    - ISO format: "2025-01-01"
    - Relative dates: "yesterday", "today", "3 days ago"

    Args:
        date_string: Date string to parse

    Returns:
        The calendar date
    """
    dt = dateparser.parse(date_string, settings={"PREFER_DATES_FROM": "past"})

    if dt is None:
        raise ValueError(f"Unable to parse date string: {date_string}")

    return dt.date()
