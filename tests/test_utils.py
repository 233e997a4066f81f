"""Tests for the time and duration helpers."""

from datetime import date, time, timedelta

import pytest

from timetracker.utils import (
    format_duration,
    format_time,
    parse_date,
    parse_duration,
    parse_time,
    shift_time,
    time_diff,
)


class TestParseTime:
    def test_parse(self) -> None:
        assert parse_time("08:30") == time(8, 30)
        assert parse_time("23:59") == time(23, 59)

    def test_single_digits(self) -> None:
        assert parse_time("8:5") == time(8, 5)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "1230", "noon", ""])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_time(value)

    def test_format(self) -> None:
        assert format_time(time(8, 5)) == "08:05"


class TestDurations:
    def test_parse_duration(self) -> None:
        assert parse_duration("01:54") == timedelta(hours=1, minutes=54)
        assert parse_duration("00:15") == timedelta(minutes=15)

    @pytest.mark.parametrize(
        "duration, expected",
        [
            (timedelta(0), "0:00"),
            (timedelta(seconds=29), "0:00"),
            (timedelta(seconds=30), "0:01"),
            (timedelta(minutes=59, seconds=45), "1:00"),
            (timedelta(hours=10, minutes=7), "10:07"),
        ],
    )
    def test_format_duration_rounds_to_minutes(self, duration, expected) -> None:
        assert format_duration(duration) == expected


class TestTimeArithmetic:
    def test_time_diff(self) -> None:
        assert time_diff(time(10, 0), time(8, 30)) == timedelta(minutes=90)
        assert time_diff(time(8, 30), time(10, 0)) == -timedelta(minutes=90)

    def test_shift_time(self) -> None:
        assert shift_time(time(8, 30), timedelta(minutes=-45)) == time(7, 45)
        assert shift_time(time(23, 0), timedelta(minutes=59)) == time(23, 59)

    def test_shift_time_out_of_day(self) -> None:
        with pytest.raises(ValueError, match="leaves the day"):
            shift_time(time(0, 10), timedelta(minutes=-20))


class TestParseDate:
    def test_iso(self) -> None:
        assert parse_date("2025-01-01") == date(2025, 1, 1)

    def test_relative(self) -> None:
        assert parse_date("3 days ago") == date.today() - timedelta(days=3)

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="Unable to parse date"):
            parse_date("xyzzy")
