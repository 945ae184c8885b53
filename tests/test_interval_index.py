"""Tests for the interval index backing overlap queries."""

import random

from chronos.interval_index import IntervalIndex


def brute_force(intervals, start, end):
    return sorted(data for s, e, data in intervals if s < end and e > start)


class TestIntervalIndex:

    def test_half_open_overlap(self):
        index = IntervalIndex()
        index.insert(9, 10, "a")
        index.insert(10, 11, "b")
        assert index.overlapping(9, 10) == ["a"]
        assert index.overlapping(9, 10.5) == ["a", "b"]
        assert index.overlapping(11, 12) == []

    def test_covering(self):
        index = IntervalIndex()
        index.insert(9, 12, "long")
        index.insert(10, 11, "short")
        assert sorted(index.covering(10)) == ["long", "short"]
        assert index.covering(12) == []

    def test_equal_starts_keep_insertion_order(self):
        index = IntervalIndex()
        for name in "abcde":
            index.insert(5, 6, name)
        assert list(index) == list("abcde")

    def test_remove_matching_data(self):
        index = IntervalIndex()
        index.insert(5, 6, "a")
        index.insert(5, 7, "b")
        assert index.remove(5, lambda d: d == "b")
        assert not index.remove(5, lambda d: d == "b")
        assert list(index) == ["a"]
        assert len(index) == 1

    def test_matches_brute_force(self):
        rng = random.Random(11)
        index = IntervalIndex()
        intervals = []
        for i in range(300):
            start = rng.randint(0, 1000)
            end = start + rng.randint(1, 60)
            index.insert(start, end, i)
            intervals.append((start, end, i))

        for start, end, data in rng.sample(intervals, 100):
            assert index.remove(start, lambda d, target=data: d == target)
            intervals.remove((start, end, data))
        index.verify_integrity()
        assert len(index) == 200

        for _ in range(50):
            start = rng.randint(0, 1000)
            end = start + rng.randint(1, 100)
            assert sorted(index.overlapping(start, end)) == brute_force(intervals, start, end)
