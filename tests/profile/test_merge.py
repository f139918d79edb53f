"""Tests for profile/merge.py.

Covers:
- collapse_blocks() sorting, combining and idempotence
- merge_profile() mode reconciliation and per-mode counting
- merge_file() absent files and repeated files
- count overflow policies
"""

import copy
from collections.abc import Callable
from pathlib import Path

import pytest

from covmerge.core.errors import CountOverflowError, ErrorCode, ModeMismatchError
from covmerge.profile import (
    CoverageBlock,
    Profile,
    ProfileMode,
    SourceBlocks,
    collapse_blocks,
    merge_file,
    merge_profile,
    read_profile,
)


def _block(sl: int, sc: int, el: int, ec: int, count: int, stmts: int = 1) -> CoverageBlock:
    return CoverageBlock(
        start_line=sl, start_col=sc, end_line=el, end_col=ec, num_stmts=stmts, count=count
    )


def _pairs(source: SourceBlocks) -> list[tuple[tuple[int, int, int, int], int]]:
    return [(b.location, b.count) for b in source.blocks]


class TestCollapseBlocks:
    """Sort-and-combine pass over one source."""

    def test_empty_list(self) -> None:
        source = SourceBlocks()
        collapse_blocks(source, ProfileMode.COUNT)
        assert source.blocks == []

    def test_single_block(self) -> None:
        source = SourceBlocks([_block(1, 1, 2, 2, 3)])
        collapse_blocks(source, ProfileMode.COUNT)
        assert _pairs(source) == [((1, 1, 2, 2), 3)]

    def test_sorts_by_start_line_then_column(self) -> None:
        source = SourceBlocks(
            [_block(10, 1, 12, 2, 0), _block(2, 9, 3, 1, 0), _block(2, 3, 2, 8, 0)]
        )

        collapse_blocks(source, ProfileMode.SET)

        assert source.locations == [(2, 3, 2, 8), (2, 9, 3, 1), (10, 1, 12, 2)]

    def test_count_mode_sums_same_location(self) -> None:
        source = SourceBlocks(
            [_block(5, 1, 6, 2, 2), _block(1, 1, 3, 2, 5), _block(5, 1, 6, 2, 4), _block(1, 1, 3, 2, 3)]
        )

        collapse_blocks(source, ProfileMode.COUNT)

        assert _pairs(source) == [((1, 1, 3, 2), 8), ((5, 1, 6, 2), 6)]

    def test_atomic_mode_sums_same_location(self) -> None:
        source = SourceBlocks([_block(1, 1, 3, 2, 5), _block(1, 1, 3, 2, 3)])
        collapse_blocks(source, ProfileMode.ATOMIC)
        assert _pairs(source) == [((1, 1, 3, 2), 8)]

    def test_set_mode_ors_same_location(self) -> None:
        source = SourceBlocks(
            [_block(1, 1, 3, 2, 0), _block(1, 1, 3, 2, 1), _block(1, 1, 3, 2, 0)]
        )

        collapse_blocks(source, ProfileMode.SET)

        assert _pairs(source) == [((1, 1, 3, 2), 1)]

    def test_set_mode_ors_raw_integers(self) -> None:
        source = SourceBlocks([_block(1, 1, 3, 2, 0b0101), _block(1, 1, 3, 2, 0b0011)])
        collapse_blocks(source, ProfileMode.SET)
        assert source.blocks[0].count == 0b0111

    def test_same_start_different_end_kept_apart(self) -> None:
        source = SourceBlocks([_block(1, 1, 3, 2, 1), _block(1, 1, 4, 2, 1)])

        collapse_blocks(source, ProfileMode.COUNT)

        assert len(source) == 2
        assert sorted(b.count for b in source.blocks) == [1, 1]

    def test_shared_start_does_not_split_duplicates(self) -> None:
        source = SourceBlocks(
            [_block(1, 1, 3, 2, 1), _block(1, 1, 4, 2, 10), _block(1, 1, 3, 2, 2)]
        )

        collapse_blocks(source, ProfileMode.COUNT)

        assert _pairs(source) == [((1, 1, 3, 2), 3), ((1, 1, 4, 2), 10)]

    def test_first_statement_count_wins(self) -> None:
        source = SourceBlocks([_block(1, 1, 3, 2, 1, stmts=2), _block(1, 1, 3, 2, 1, stmts=9)])

        collapse_blocks(source, ProfileMode.COUNT)

        assert source.blocks[0].num_stmts == 2
        assert source.blocks[0].count == 2

    def test_idempotent(self) -> None:
        source = SourceBlocks(
            [_block(3, 1, 4, 1, 1), _block(1, 1, 2, 1, 2), _block(3, 1, 4, 1, 5), _block(1, 1, 2, 1, 0)]
        )

        collapse_blocks(source, ProfileMode.COUNT)
        once = copy.deepcopy(source)
        collapse_blocks(source, ProfileMode.COUNT)

        assert source == once

    def test_no_duplicate_locations_after_collapse(self) -> None:
        blocks = [_block(n % 4 + 1, n % 3 + 1, n % 4 + 2, 1, n) for n in range(40)]
        source = SourceBlocks(blocks)

        collapse_blocks(source, ProfileMode.COUNT)

        locations = source.locations
        assert len(locations) == len(set(locations))
        assert [loc[:2] for loc in locations] == sorted(loc[:2] for loc in locations)
        assert sum(b.count for b in source.blocks) == sum(range(40))


class TestCountOverflow:
    """Explicit handling of 32-bit count overflow."""

    def test_saturates_by_default(self) -> None:
        source = SourceBlocks([_block(1, 1, 2, 2, 4294967290), _block(1, 1, 2, 2, 10)])

        collapse_blocks(source, ProfileMode.COUNT, name="a.go")

        assert source.blocks[0].count == 4294967295

    def test_error_policy_raises(self) -> None:
        source = SourceBlocks([_block(1, 1, 2, 2, 4294967290), _block(1, 1, 2, 2, 10)])

        with pytest.raises(CountOverflowError) as exc_info:
            collapse_blocks(source, ProfileMode.COUNT, overflow="error", name="a.go")

        err = exc_info.value
        assert err.code == ErrorCode.PROFILE_COUNT_OVERFLOW
        assert err.details["source"] == "a.go"
        assert err.details["total"] == 4294967300

    def test_exact_max_is_not_overflow(self) -> None:
        source = SourceBlocks([_block(1, 1, 2, 2, 4294967290), _block(1, 1, 2, 2, 5)])

        collapse_blocks(source, ProfileMode.COUNT, overflow="error")

        assert source.blocks[0].count == 4294967295

    def test_set_mode_never_overflows(self) -> None:
        source = SourceBlocks([_block(1, 1, 2, 2, 4294967295), _block(1, 1, 2, 2, 4294967295)])

        collapse_blocks(source, ProfileMode.SET, overflow="error")

        assert source.blocks[0].count == 4294967295


class TestMergeProfile:
    """Folding parsed profiles into a summary."""

    def test_adopts_mode_of_first_profile(self) -> None:
        summary = Profile()

        merge_profile(summary, Profile(mode=ProfileMode.ATOMIC))

        assert summary.mode is ProfileMode.ATOMIC

    def test_mode_mismatch_raises(self) -> None:
        summary = Profile(mode=ProfileMode.SET)

        with pytest.raises(ModeMismatchError) as exc_info:
            merge_profile(summary, Profile(mode=ProfileMode.COUNT), path="child.out")

        err = exc_info.value
        assert err.code == ErrorCode.PROFILE_MODE_MISMATCH
        assert err.details == {"expected": "set", "got": "count", "path": "child.out"}

    def test_mode_mismatch_leaves_summary_unchanged(self) -> None:
        summary = Profile(mode=ProfileMode.SET)
        summary.sources["a.go"] = SourceBlocks([_block(1, 1, 3, 2, 1)])
        before = copy.deepcopy(summary)
        other = Profile(mode=ProfileMode.COUNT)
        other.sources["a.go"] = SourceBlocks([_block(1, 1, 3, 2, 7)])
        other.sources["b.go"] = SourceBlocks([_block(1, 1, 3, 2, 7)])

        with pytest.raises(ModeMismatchError):
            merge_profile(summary, other)

        assert summary == before

    def test_profile_without_mode_rejected(self) -> None:
        with pytest.raises(ValueError, match="without a mode"):
            merge_profile(Profile(), Profile())

    def test_creates_and_appends_sources(self) -> None:
        summary = Profile()
        first = Profile(mode=ProfileMode.COUNT)
        first.sources["a.go"] = SourceBlocks([_block(4, 1, 5, 1, 1)])
        second = Profile(mode=ProfileMode.COUNT)
        second.sources["a.go"] = SourceBlocks([_block(1, 1, 2, 1, 2)])
        second.sources["b.go"] = SourceBlocks([_block(1, 1, 2, 1, 3)])

        merge_profile(summary, first)
        merge_profile(summary, second)

        assert _pairs(summary.sources["a.go"]) == [((1, 1, 2, 1), 2), ((4, 1, 5, 1), 1)]
        assert _pairs(summary.sources["b.go"]) == [((1, 1, 2, 1), 3)]

    def test_untouched_sources_are_kept(self) -> None:
        summary = Profile(mode=ProfileMode.COUNT)
        summary.sources["keep.go"] = SourceBlocks([_block(1, 1, 2, 1, 9)])
        other = Profile(mode=ProfileMode.COUNT)
        other.sources["new.go"] = SourceBlocks([_block(1, 1, 2, 1, 1)])

        merge_profile(summary, other)

        assert _pairs(summary.sources["keep.go"]) == [((1, 1, 2, 1), 9)]
        assert set(summary.sources) == {"keep.go", "new.go"}

    def test_collapses_duplicates_within_single_profile(self) -> None:
        summary = Profile()
        profile = Profile(mode=ProfileMode.COUNT)
        profile.sources["a.go"] = SourceBlocks(
            [_block(1, 1, 3, 2, 5), _block(1, 1, 3, 2, 3), _block(0, 0, 0, 9, 1)]
        )

        merge_profile(summary, profile)

        assert _pairs(summary.sources["a.go"]) == [((0, 0, 0, 9), 1), ((1, 1, 3, 2), 8)]


class TestMergeFile:
    """Reading and merging profile files."""

    def test_count_scenario(self, profile_file: Callable[..., Path]) -> None:
        summary = Profile()

        merge_file(profile_file("mode: count", "a.go:1.1,3.2 2 5"), summary)
        merge_file(profile_file("mode: count", "a.go:1.1,3.2 2 3"), summary)

        assert summary.mode is ProfileMode.COUNT
        assert summary.sources["a.go"].blocks == [_block(1, 1, 3, 2, 8, stmts=2)]

    def test_set_scenario(self, profile_file: Callable[..., Path]) -> None:
        summary = Profile()

        merge_file(profile_file("mode: set", "a.go:1.1,3.2 2 1"), summary)
        merge_file(profile_file("mode: set", "a.go:1.1,3.2 2 1"), summary)

        assert summary.sources["a.go"].blocks == [_block(1, 1, 3, 2, 1, stmts=2)]

    def test_returns_true_when_merged(self, profile_file: Callable[..., Path]) -> None:
        assert merge_file(profile_file("mode: set"), Profile()) is True

    def test_absent_file_is_noop(self, tmp_path: Path, profile_file: Callable[..., Path]) -> None:
        summary = Profile()
        merge_file(profile_file("mode: count", "a.go:1.1,3.2 2 5"), summary)
        before = copy.deepcopy(summary)

        merged = merge_file(tmp_path / "missing.out", summary)

        assert merged is False
        assert summary == before

    def test_empty_file_is_noop(self, tmp_path: Path) -> None:
        summary = Profile()
        path = tmp_path / "empty.out"
        path.write_text("")

        assert merge_file(path, summary) is False
        assert summary == Profile()

    def test_absent_file_does_not_set_mode(self, tmp_path: Path) -> None:
        summary = Profile()
        merge_file(tmp_path / "missing.out", summary)
        assert summary.mode is None

    def test_mode_mismatch_between_files(self, profile_file: Callable[..., Path]) -> None:
        summary = Profile()
        merge_file(profile_file("mode: set", "a.go:1.1,3.2 2 1"), summary)
        before = copy.deepcopy(summary)

        with pytest.raises(ModeMismatchError):
            merge_file(profile_file("mode: count", "a.go:1.1,3.2 2 1"), summary)

        assert summary == before

    @pytest.mark.parametrize(("mode", "factor"), [("count", 2), ("atomic", 2), ("set", 1)])
    def test_same_file_twice(
        self, profile_file: Callable[..., Path], mode: str, factor: int
    ) -> None:
        path = profile_file(
            f"mode: {mode}",
            "a.go:1.1,3.2 2 1",
            "a.go:4.1,5.2 1 0",
            "b.go:7.3,9.1 4 1",
        )
        single = Profile()
        merge_file(path, single)
        summary = Profile()

        merge_file(path, summary)
        merge_file(path, summary)

        expected = {
            src: {loc: count * factor for loc, count in pairs.items()}
            for src, pairs in single.counts().items()
        }
        assert summary.counts() == expected

    @pytest.mark.parametrize("mode", ["count", "set"])
    def test_order_independent(self, profile_file: Callable[..., Path], mode: str) -> None:
        a = profile_file(
            f"mode: {mode}",
            "x.go:1.1,2.2 1 1",
            "x.go:3.1,4.2 1 0",
            "y.go:1.1,2.2 1 1",
        )
        b = profile_file(
            f"mode: {mode}",
            "x.go:3.1,4.2 1 1",
            "z.go:5.1,6.2 1 1",
            "x.go:1.1,2.2 1 1",
        )
        ab, ba = Profile(), Profile()

        merge_file(a, ab)
        merge_file(b, ab)
        merge_file(b, ba)
        merge_file(a, ba)

        assert ab.counts() == ba.counts()
        assert {src: s.locations for src, s in ab.sources.items()} == {
            src: s.locations for src, s in ba.sources.items()
        }

    def test_matches_single_profile_collapsed(self, profile_file: Callable[..., Path]) -> None:
        path = profile_file(
            "mode: count",
            "a.go:9.1,9.9 1 1",
            "a.go:1.1,3.2 2 5",
            "a.go:9.1,9.9 1 2",
        )
        parsed = read_profile(path)
        assert parsed is not None
        expected = copy.deepcopy(parsed.sources["a.go"])
        collapse_blocks(expected, ProfileMode.COUNT)
        summary = Profile()

        merge_file(path, summary)

        assert summary.sources["a.go"] == expected
        assert _pairs(expected) == [((1, 1, 3, 2), 5), ((9, 1, 9, 9), 3)]

    def test_overflow_policy_passed_through(self, profile_file: Callable[..., Path]) -> None:
        summary = Profile()
        merge_file(profile_file("mode: count", "a.go:1.1,3.2 2 4294967295"), summary)

        with pytest.raises(CountOverflowError):
            merge_file(
                profile_file("mode: count", "a.go:1.1,3.2 2 1"), summary, overflow="error"
            )
