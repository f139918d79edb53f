"""Coverage profile data model.

A profile is one coverage dataset: a counting mode plus, per source file,
the list of covered code blocks. The same model serves both a freshly
parsed profile file and the running summary a merge session builds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from covmerge.config.constants import MODE_ATOMIC, MODE_COUNT, MODE_SET

Location = tuple[int, int, int, int]
"""(start_line, start_col, end_line, end_col)"""


class ProfileMode(str, Enum):
    """Counting semantics of a profile.

    - set: counts are 0/1 flags, combined with bitwise OR
    - count: execution counts, summed
    - atomic: execution counts gathered thread-safely, summed
    """

    SET = MODE_SET
    COUNT = MODE_COUNT
    ATOMIC = MODE_ATOMIC

    @property
    def additive(self) -> bool:
        """True if counts of same-location blocks are summed."""
        return self is not ProfileMode.SET


@dataclass(slots=True)
class CoverageBlock:
    """A single covered code region.

    Counts are mutated in place when same-location blocks are combined.
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    num_stmts: int
    count: int

    @property
    def location(self) -> Location:
        return (self.start_line, self.start_col, self.end_line, self.end_col)


@dataclass(slots=True)
class SourceBlocks:
    """Coverage blocks of a single source file.

    Insertion order until collapsed; sorted and free of duplicate
    locations after every merge.
    """

    blocks: list[CoverageBlock] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.blocks)

    @property
    def locations(self) -> list[Location]:
        return [b.location for b in self.blocks]


@dataclass(slots=True)
class Profile:
    """Coverage profile, either parsed from a file or a merge summary.

    Sources are keyed by source file path as written in the profile.
    """

    mode: ProfileMode | None = None
    sources: dict[str, SourceBlocks] = field(default_factory=dict)

    @property
    def block_count(self) -> int:
        """Total number of blocks across all sources."""
        return sum(len(s) for s in self.sources.values())

    def source(self, path: str) -> SourceBlocks:
        """Return the block list for path, creating an empty one if absent."""
        src = self.sources.get(path)
        if src is None:
            src = self.sources[path] = SourceBlocks()
        return src

    def counts(self) -> dict[str, dict[Location, int]]:
        """Map each source to its {location: count} pairs."""
        return {
            path: {b.location: b.count for b in src.blocks} for path, src in self.sources.items()
        }
