"""Coverage profile parsing and merging.

This package provides:
- Reading line-oriented block coverage profiles
- Merging profiles into one summary with sum or OR semantics per mode
- Writing a summary back in the same format

Usage:
    from covmerge.profile import MergeSession

    session = MergeSession(output_dir="/tmp/cov")
    session.merge_all(["main.out", "child-1.out", "child-2.out"])
    session.write("merged.out")
"""

from covmerge.profile.merge import collapse_blocks, merge_file, merge_profile
from covmerge.profile.models import (
    CoverageBlock,
    Location,
    Profile,
    ProfileMode,
    SourceBlocks,
)
from covmerge.profile.reader import read_profile, to_uint16, to_uint32
from covmerge.profile.session import MergeSession, to_output_dir
from covmerge.profile.writer import format_profile, write_profile

__all__ = [
    # Models
    "CoverageBlock",
    "Location",
    "Profile",
    "ProfileMode",
    "SourceBlocks",
    # Reader
    "read_profile",
    "to_uint16",
    "to_uint32",
    # Merge
    "collapse_blocks",
    "merge_file",
    "merge_profile",
    # Session
    "MergeSession",
    "to_output_dir",
    # Writer
    "format_profile",
    "write_profile",
]
