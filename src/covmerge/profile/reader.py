"""Coverage profile reader.

Profiles are line-oriented UTF-8 text:
mode: set|count|atomic
<path>:<startline>.<startcol>,<endline>.<endcol> <numstmt> <count>

Example:
mode: count
example.com/pkg/main.go:10.2,12.16 3 1
example.com/pkg/main.go:15.2,20.16 5 0

A missing or empty file is not an error: it is what an optional re-executed
child leaves behind when it never ran. Everything else that doesn't match
the grammar is fatal; there is no partial recovery.
"""

import re
from collections.abc import Iterator
from pathlib import Path

import structlog

from covmerge.config.constants import (
    BLOCK_LINE_GRAMMAR,
    MODE_LINE_GRAMMAR,
    UINT16_MAX,
    UINT32_MAX,
)
from covmerge.core.errors import ProfileParseError, ProfileReadError
from covmerge.profile.models import CoverageBlock, Profile, ProfileMode, SourceBlocks

log = structlog.get_logger(__name__)

# First line: the mode coverage data was gathered in.
MODE_RE = re.compile(r"mode: ([a-z]+)")

# Block lines. The path is greedy, so the last ':' that is followed by a
# valid position is the delimiter.
LINE_RE = re.compile(r"(.+):([0-9]+)\.([0-9]+),([0-9]+)\.([0-9]+) ([0-9]+) ([0-9]+)")


def _to_uint(text: str, limit: int) -> int:
    if not text.isascii() or not text.isdigit():
        raise ValueError(f"invalid unsigned integer {text!r}")
    value = int(text)
    if value > limit:
        raise ValueError(f"value {text} out of range (max {limit})")
    return value


def to_uint32(text: str) -> int:
    """Convert decimal text to an unsigned 32-bit value.

    Raises:
        ValueError: If text isn't a decimal number or exceeds 2**32-1.
    """
    return _to_uint(text, UINT32_MAX)


def to_uint16(text: str) -> int:
    """Convert decimal text to an unsigned 16-bit value.

    Raises:
        ValueError: If text isn't a decimal number or exceeds 2**16-1.
    """
    return _to_uint(text, UINT16_MAX)


def _strip_eol(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def read_profile(path: Path) -> Profile | None:
    """Read a coverage profile file.

    Args:
        path: Profile file location.

    Returns:
        The parsed profile with blocks in file order (unsorted), or None if
        the file doesn't exist or is empty.

    Raises:
        ProfileParseError: On a malformed mode or block line, a numeric field
            exceeding its width, or content that isn't UTF-8.
        ProfileReadError: If an existing file can't be opened or read.
    """
    try:
        with path.open(encoding="utf-8", newline="\n") as f:
            return _parse_lines(str(path), f)
    except FileNotFoundError:
        # A re-executed child that never wrote coverage data.
        log.debug("profile_absent", path=str(path))
        return None
    except UnicodeDecodeError as e:
        raise ProfileParseError.undecodable(str(path), str(e)) from e
    except OSError as e:
        raise ProfileReadError.from_os_error(str(path), e) from e


def _parse_lines(name: str, lines: Iterator[str]) -> Profile | None:
    first = next(lines, None)
    if first is None:
        log.debug("profile_empty", path=name)
        return None

    mode_line = _strip_eol(first)
    m = MODE_RE.fullmatch(mode_line)
    if m is None:
        raise ProfileParseError.bad_line(name, 1, mode_line, MODE_LINE_GRAMMAR)
    try:
        mode = ProfileMode(m.group(1))
    except ValueError as e:
        raise ProfileParseError.bad_field(
            name, 1, mode_line, f"unsupported mode {m.group(1)!r}"
        ) from e

    profile = Profile(mode=mode)

    # Blocks of one source are usually contiguous, so cache the most recent
    # source and only fall back to the mapping when the path changes.
    srcname: str | None = None
    source: SourceBlocks | None = None

    for line_no, raw in enumerate(lines, start=2):
        line = _strip_eol(raw)
        m = LINE_RE.fullmatch(line)
        if m is None:
            raise ProfileParseError.bad_line(name, line_no, line, BLOCK_LINE_GRAMMAR)

        if m.group(1) != srcname or source is None:
            srcname = m.group(1)
            source = profile.source(srcname)

        try:
            block = CoverageBlock(
                start_line=to_uint32(m.group(2)),
                start_col=to_uint16(m.group(3)),
                end_line=to_uint32(m.group(4)),
                end_col=to_uint16(m.group(5)),
                num_stmts=to_uint16(m.group(6)),
                count=to_uint32(m.group(7)),
            )
        except ValueError as e:
            raise ProfileParseError.bad_field(name, line_no, line, str(e)) from e
        source.blocks.append(block)

    log.debug(
        "profile_read",
        path=name,
        mode=mode.value,
        sources=len(profile.sources),
        blocks=profile.block_count,
    )
    return profile
