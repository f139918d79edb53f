"""Merge sessions: one summary profile fed by a sequence of profile files.

A process that re-executes itself leaves one profile for the main process
and one per re-executed child. The driver names them in discovery order
(main process first); relative names are resolved into the output
directory, the same way the test binary places its own profile there.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from covmerge.config.models import MergeConfig, OverflowPolicy
from covmerge.core.logging import set_session_id
from covmerge.profile.merge import merge_file
from covmerge.profile.models import Profile
from covmerge.profile.writer import write_profile

log = structlog.get_logger(__name__)


def to_output_dir(name: str | Path, output_dir: str | Path | None) -> Path:
    """Relocate a profile name into the output directory.

    Absolute names, and any name when no output directory is set, are
    returned unchanged.
    """
    path = Path(name)
    if output_dir is None or str(output_dir) == "" or path.is_absolute():
        return path
    return Path(output_dir) / path


class MergeSession:
    """Builds one summary profile from profile files, in the order merged.

    The session exclusively owns its summary. Any error raised by merge()
    aborts the session; merges already applied are kept.
    """

    def __init__(
        self,
        *,
        output_dir: str | Path | None = None,
        overflow: OverflowPolicy = "saturate",
    ) -> None:
        self.output_dir = output_dir
        self.overflow: OverflowPolicy = overflow
        self.summary = Profile()
        self.merged: list[Path] = []
        self.absent: list[Path] = []
        self.session_id = set_session_id()

    @classmethod
    def from_config(cls, config: MergeConfig) -> MergeSession:
        return cls(output_dir=config.output_dir, overflow=config.overflow)

    def resolve(self, name: str | Path) -> Path:
        return to_output_dir(name, self.output_dir)

    def merge(self, name: str | Path) -> bool:
        """Merge one profile file; returns False if it was absent or empty."""
        path = self.resolve(name)
        if merge_file(path, self.summary, overflow=self.overflow):
            self.merged.append(path)
            return True
        self.absent.append(path)
        return False

    def merge_all(self, names: Iterable[str | Path]) -> int:
        """Merge profile files in order; returns how many were merged."""
        count = 0
        for name in names:
            if self.merge(name):
                count += 1
        log.info(
            "session_merged",
            merged=len(self.merged),
            absent=len(self.absent),
            sources=len(self.summary.sources),
            blocks=self.summary.block_count,
        )
        return count

    def write(self, name: str | Path) -> Path:
        """Write the summary profile; relative names go to the output directory."""
        path = self.resolve(name)
        write_profile(self.summary, path)
        log.info("summary_written", path=str(path))
        return path
