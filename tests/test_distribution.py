"""Tests for distributing vague activity time onto the named activities."""

from datetime import timedelta

from tests.helpers import normal, t
from timetracker.collector import BlockCollector, Summary
from timetracker.distribution import cutoff_sum, distribute, distributed_share


def minutes(n: int) -> timedelta:
    return timedelta(minutes=n)


def summarize(*blocks: tuple[str, str], closing: str) -> Summary:
    collector = BlockCollector()
    for start, activity in blocks:
        collector.add(normal(start, activity))
    return collector.finalize(t(closing)).summary


class TestCutoffSum:
    def test_without_cutoff(self) -> None:
        summary = summarize(("08:00", "a"), ("08:05", "b"), closing="09:00")
        assert cutoff_sum(summary.activities, None) == timedelta(0)

    def test_only_normal_activities_below_cutoff(self) -> None:
        summary = summarize(
            ("08:00", "a"),
            ("08:05", "_x"),
            ("08:07", "break"),
            ("08:10", "b"),
            ("08:20", "c"),
            closing="10:00",
        )
        # a (5) and b (10) are below, _x and break never count, c is above
        assert cutoff_sum(summary.activities, minutes(15)) == minutes(15)

    def test_cutoff_is_strict(self) -> None:
        summary = summarize(("08:00", "a"), ("08:15", "b"), closing="09:00")
        assert cutoff_sum(summary.activities, minutes(15)) == timedelta(0)


class TestDistribute:
    """Tests for distribute()."""

    def test_distributable_time_is_shared_proportionally(self) -> None:
        summary = summarize(
            ("08:00", "a"),  # 60
            ("09:00", "_meeting"),  # 30
            ("09:30", "b"),  # 30
            closing="10:00",
        )
        result = distribute(summary)
        assert result == {"a": minutes(80), "b": minutes(40)}

    def test_conservation(self) -> None:
        """Everything but the breaks ends up in the named activities."""
        summary = summarize(
            ("08:00", "a"),
            ("09:10", "_meeting"),
            ("09:55", "break"),
            ("10:20", "b"),
            ("11:00", "_admin"),
            ("11:13", "c"),
            closing="12:00",
        )
        result = distribute(summary)
        assert set(result) == {"a", "b", "c"}
        total = sum(result.values(), timedelta(0))
        # shares are truncated to whole seconds
        assert summary.work_time - timedelta(seconds=len(result)) <= total
        assert total <= summary.work_time

    def test_breaks_are_excluded(self) -> None:
        summary = summarize(("08:00", "a"), ("09:00", "break"), ("09:30", "end"), closing="10:00")
        assert distribute(summary) == {"a": minutes(60)}

    def test_cutoff_activities_are_distributed(self) -> None:
        summary = summarize(
            ("08:00", "a"),  # 90
            ("09:30", "tiny"),  # 10
            ("09:40", "b"),  # 30
            closing="10:10",
        )
        result = distribute(summary, cutoff=minutes(15))
        assert "tiny" not in result
        assert result["a"] == minutes(90) + timedelta(seconds=int(600 * 90 / 120))
        assert result["b"] == minutes(30) + timedelta(seconds=int(600 * 30 / 120))

    def test_all_keeps_distributable_activities(self) -> None:
        summary = summarize(
            ("08:00", "a"),
            ("09:00", "_meeting"),
            ("09:30", "b"),
            closing="10:00",
        )
        result = distribute(summary, all=True)
        assert result == {"a": minutes(60), "_meeting": minutes(30), "b": minutes(30)}

    def test_all_still_distributes_cutoff_time(self) -> None:
        summary = summarize(
            ("08:00", "a"),  # 60
            ("09:00", "tiny"),  # 6
            ("09:06", "_meeting"),  # 24
            closing="09:30",
        )
        result = distribute(summary, cutoff=minutes(10), all=True)
        assert "tiny" not in result
        # only the 6 minutes of "tiny" are distributed
        assert result["a"] == minutes(66)

    def test_zero_denominator(self) -> None:
        """Only distributable time: nothing to distribute onto, no division by zero."""
        summary = summarize(("08:00", "_meeting"), ("09:00", "break"), closing="09:30")
        assert distribute(summary) == {}
        assert distribute(summary, all=True) == {"_meeting": minutes(60)}

    def test_everything_below_cutoff(self) -> None:
        summary = summarize(("08:00", "a"), ("08:05", "b"), closing="08:10")
        assert distribute(summary, cutoff=minutes(15)) == {}

    def test_truncates_to_whole_seconds(self) -> None:
        summary = summarize(
            ("08:00", "a"),  # 7
            ("08:07", "b"),  # 4
            ("08:11", "_x"),  # 1
            closing="08:12",
        )
        result = distribute(summary)
        # 60s * 7/11 = 38.18s, 60s * 4/11 = 21.82s
        assert result == {
            "a": minutes(7) + timedelta(seconds=38),
            "b": minutes(4) + timedelta(seconds=21),
        }


class TestDistributedShare:
    def test_share(self) -> None:
        summary = summarize(("08:00", "a"), ("09:00", "_meeting"), ("09:30", "b"), closing="10:00")
        assert distributed_share(summary, minutes(60), None) == minutes(20)

    def test_share_with_zero_denominator(self) -> None:
        summary = summarize(("08:00", "_meeting"), closing="09:00")
        assert distributed_share(summary, minutes(60), None) == timedelta(0)
