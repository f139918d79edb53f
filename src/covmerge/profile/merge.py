"""Coverage profile merging.

A summary profile absorbs parsed profiles one at a time. Blocks describing
the same code location (start line/col, end line/col) are combined:

- count/atomic: execution counts are summed
- set: execution counts are OR-ed

After every merge the touched sources are sorted by start position and free
of duplicate locations. Statement counts of combined blocks are not
re-validated; the first block's value wins.
"""

from pathlib import Path

import structlog

from covmerge.config.constants import UINT32_MAX
from covmerge.config.models import OverflowPolicy
from covmerge.core.errors import CountOverflowError, ModeMismatchError
from covmerge.profile.models import CoverageBlock, Profile, ProfileMode, SourceBlocks
from covmerge.profile.reader import read_profile

log = structlog.get_logger(__name__)


def collapse_blocks(
    source: SourceBlocks,
    mode: ProfileMode,
    *,
    overflow: OverflowPolicy = "saturate",
    name: str = "",
) -> None:
    """Sort a source's blocks and combine those at the same location.

    Runs in place. Collapsing an already collapsed list changes nothing.

    Args:
        source: Blocks of one source file.
        mode: Counting semantics deciding sum vs. OR.
        overflow: Policy for sums exceeding 2**32-1.
        name: Source path, for diagnostics only.

    Raises:
        CountOverflowError: If a sum overflows and overflow is "error".
    """
    blocks = source.blocks
    if not blocks:
        return

    # Sorting makes blocks for the same location adjacent. Ties on the start
    # position are broken by the end position, otherwise two blocks sharing a
    # start could separate duplicates of one of them.
    blocks.sort(key=lambda b: b.location)

    additive = mode.additive
    mergeidx = 0
    for idx in range(1, len(blocks)):
        mergeblock = blocks[mergeidx]
        block = blocks[idx]
        if mergeblock.location == block.location:
            if additive:
                mergeblock.count = _add_counts(mergeblock, block, overflow, name)
            else:
                mergeblock.count |= block.count
            continue
        mergeidx += 1
        if mergeidx != idx:
            blocks[mergeidx] = block

    del blocks[mergeidx + 1 :]


def _add_counts(
    mergeblock: CoverageBlock, block: CoverageBlock, overflow: OverflowPolicy, name: str
) -> int:
    total = mergeblock.count + block.count
    if total <= UINT32_MAX:
        return total
    if overflow == "error":
        raise CountOverflowError.at(name, mergeblock.location, total)
    log.warning(
        "count_saturated",
        source=name,
        location=list(mergeblock.location),
        total=total,
    )
    return UINT32_MAX


def merge_profile(
    summary: Profile,
    profile: Profile,
    *,
    overflow: OverflowPolicy = "saturate",
    path: str | None = None,
) -> None:
    """Fold a parsed profile into the summary profile.

    The summary adopts the profile's mode if it has none yet. The mode is
    checked before any source is touched, so a mismatch leaves the summary
    exactly as it was.

    Args:
        summary: Running summary, mutated in place.
        profile: Freshly parsed profile. Its blocks are absorbed into the
            summary and must not be reused afterwards.
        overflow: Policy for summed counts exceeding 2**32-1.
        path: Profile file the data came from, for diagnostics only.

    Raises:
        ModeMismatchError: If the profile's mode differs from the summary's.
        CountOverflowError: If a sum overflows and overflow is "error".
    """
    if profile.mode is None:
        raise ValueError("Cannot merge a profile without a mode")
    if summary.mode is None:
        summary.mode = profile.mode
    elif profile.mode != summary.mode:
        raise ModeMismatchError.between(summary.mode.value, profile.mode.value, path)

    mode = summary.mode
    for srcname, source in profile.sources.items():
        sumsource = summary.sources.get(srcname)
        if sumsource is None:
            sumsource = summary.sources[srcname] = SourceBlocks(blocks=source.blocks)
        else:
            sumsource.blocks.extend(source.blocks)
        collapse_blocks(sumsource, mode, overflow=overflow, name=srcname)


def merge_file(
    path: Path,
    summary: Profile,
    *,
    overflow: OverflowPolicy = "saturate",
) -> bool:
    """Read a profile file and merge it into the summary.

    Args:
        path: Profile file to read.
        summary: Running summary, mutated in place.
        overflow: Policy for summed counts exceeding 2**32-1.

    Returns:
        True if the file was merged, False if it was absent or empty.

    Raises:
        ProfileParseError: If the file is malformed.
        ProfileReadError: If the file exists but can't be read.
        ModeMismatchError: If the file's mode differs from the summary's.
        CountOverflowError: If a sum overflows and overflow is "error".
    """
    profile = read_profile(path)
    if profile is None:
        log.info("profile_skipped", path=str(path), reason="absent")
        return False
    merge_profile(summary, profile, overflow=overflow, path=str(path))
    log.debug("profile_merged", path=str(path), sources=len(profile.sources))
    return True
