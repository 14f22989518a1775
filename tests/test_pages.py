"""Tests for hidden page range handling."""

from __future__ import annotations

import pytest

from manualshelf.index.pages import (
    parse_hidden_ranges,
    parse_range_spec,
    resolve_page,
    visible_pages,
)


class TestParseRangeSpec:
    """Test parse_range_spec function."""

    def test_ranges_and_open_end(self) -> None:
        """Should expand closed and open ranges."""
        hidden = parse_range_spec("1-18,37-", 40)
        assert hidden == set(range(1, 19)) | set(range(37, 41))

    def test_single_pages(self) -> None:
        """Should accept bare page numbers."""
        assert parse_range_spec("3, 5", 10) == {3, 5}

    def test_clamps_overlong_end(self) -> None:
        """Should clamp the end bound to the page count."""
        assert parse_range_spec("8-100", 10) == {8, 9, 10}

    def test_ignores_invalid_tokens(self) -> None:
        """Should skip malformed and out-of-range tokens individually."""
        assert parse_range_spec("abc,0,11,5-3,-4,2,x-7,9-y", 10) == {2}

    def test_ignores_non_ascii_digits(self) -> None:
        """Should skip tokens with superscript or other non-ASCII digits."""
        assert parse_range_spec("2,³,1-²,٣", 10) == {2}
        assert parse_hidden_ranges(["!hide-page-range=1-³"], 5) == []

    def test_overlaps_deduplicated(self) -> None:
        """Should union overlapping ranges."""
        assert parse_range_spec("1-5,3-7,5", 10) == set(range(1, 8))

    def test_zero_pages(self) -> None:
        """Should hide nothing in an empty document."""
        assert parse_range_spec("1-", 0) == set()


class TestParseHiddenRanges:
    """Test parse_hidden_ranges function."""

    def test_reads_directive(self) -> None:
        """Should return a sorted list from the directive tag."""
        tags = ["brand=Acme", "!hide-page-range=37-,1-18"]
        hidden = parse_hidden_ranges(tags, 40)
        assert hidden == list(range(1, 19)) + list(range(37, 41))

    def test_multiple_directives_union(self) -> None:
        """Should combine several directives."""
        tags = ["!hide-page-range=1", "!hide-page-range=3"]
        assert parse_hidden_ranges(tags, 5) == [1, 3]

    def test_no_directive(self) -> None:
        """Should hide nothing without a directive."""
        assert parse_hidden_ranges(["hide-page-range=1-3"], 5) == []

    def test_directive_without_payload(self) -> None:
        """Should ignore a bare directive."""
        assert parse_hidden_ranges(["!hide-page-range"], 5) == []


class TestVisiblePages:
    """Test visible_pages function."""

    def test_example(self) -> None:
        """Should leave pages 19..36 for '1-18,37-' of 40."""
        hidden = parse_hidden_ranges(["!hide-page-range=1-18,37-"], 40)
        assert visible_pages(40, hidden) == list(range(19, 37))

    @pytest.mark.parametrize(
        "spec,total",
        [("", 0), ("1", 1), ("1-", 7), ("2-3,5", 6), ("9-,x,0,4", 12), ("1-100", 3)],
    )
    def test_partition(self, spec: str, total: int) -> None:
        """Should split 1..N into disjoint visible and hidden sets."""
        hidden = parse_hidden_ranges([f"!hide-page-range={spec}"], total)
        visible = visible_pages(total, hidden)

        assert set(visible) | set(hidden) == set(range(1, total + 1))
        assert set(visible) & set(hidden) == set()
        assert visible == sorted(visible)


class TestResolvePage:
    """Test resolve_page function."""

    def test_visible_page_kept(self) -> None:
        """Should keep a visible page."""
        assert resolve_page(20, [19, 20, 21]) == 20

    def test_hidden_page_moves_forward(self) -> None:
        """Should move to the next visible page."""
        assert resolve_page(3, [19, 20]) == 19

    def test_past_end_falls_back(self) -> None:
        """Should fall back to the last visible page."""
        assert resolve_page(40, [19, 20]) == 20

    def test_default_first(self) -> None:
        """Should open at the first visible page by default."""
        assert resolve_page(None, [4, 5]) == 4

    def test_nothing_visible(self) -> None:
        """Should return None when every page is hidden."""
        assert resolve_page(1, []) is None
