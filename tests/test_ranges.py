"""Tests for range primitives."""
from __future__ import annotations

import pytest

from emmet_assist.ranges import (
    Range,
    contains,
    is_space,
    narrow_to_non_space,
    range_contains,
    range_empty,
    ranges_equal,
    substr,
)


class TestRange:
    def test_rejects_inverted_range(self) -> None:
        with pytest.raises(ValueError):
            Range(5, 2)

    def test_rejects_negative_start(self) -> None:
        with pytest.raises(ValueError):
            Range(-1, 2)

    def test_length_and_empty(self) -> None:
        assert len(Range(3, 7)) == 4
        assert Range(4, 4).empty
        assert range_empty(Range(4, 4))
        assert not Range(4, 5).empty

    def test_shift_returns_new_range(self) -> None:
        r = Range(2, 4)
        assert r.shift(3) == Range(5, 7)
        assert r == Range(2, 4)


class TestRangeHelpers:
    def test_contains_includes_both_bounds(self) -> None:
        r = Range(10, 13)
        assert contains(r, 10)
        assert contains(r, 13)
        assert not contains(r, 9)
        assert not contains(r, 14)

    def test_range_contains(self) -> None:
        assert range_contains(Range(0, 10), Range(2, 5))
        assert range_contains(Range(0, 10), Range(0, 10))
        assert not range_contains(Range(2, 5), Range(0, 10))

    def test_mutual_containment_means_equal(self) -> None:
        ranges = [Range(s, e) for s in range(4) for e in range(s, 4)]
        for a in ranges:
            for b in ranges:
                if range_contains(a, b) and range_contains(b, a):
                    assert ranges_equal(a, b)
                    assert a == b

    def test_ranges_equal(self) -> None:
        assert ranges_equal(Range(1, 2), Range(1, 2))
        assert not ranges_equal(Range(1, 2), Range(1, 3))

    def test_is_space(self) -> None:
        assert is_space(" \t\n")
        assert not is_space("")
        assert not is_space(" a ")

    def test_substr(self) -> None:
        assert substr("hello world", Range(6, 11)) == "world"

    def test_narrow_to_non_space(self) -> None:
        text = "a  {  color  } "
        assert narrow_to_non_space(text, Range(4, 13)) == Range(6, 11)

    def test_narrow_whitespace_only_range_collapses(self) -> None:
        assert narrow_to_non_space("x    y", Range(1, 5)).empty
