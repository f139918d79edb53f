"""Serialize a profile back into the coverage profile line format."""

from pathlib import Path

from covmerge.core.errors import ProfileWriteError
from covmerge.profile.models import Profile


def format_profile(profile: Profile) -> str:
    """Render a profile as text: mode line, then blocks by ascending source path.

    Raises:
        ProfileWriteError: If the profile has no mode.
    """
    if profile.mode is None:
        raise ProfileWriteError.no_mode("<memory>")

    lines = [f"mode: {profile.mode.value}"]
    for path in sorted(profile.sources):
        for b in profile.sources[path].blocks:
            lines.append(
                f"{path}:{b.start_line}.{b.start_col},{b.end_line}.{b.end_col} "
                f"{b.num_stmts} {b.count}"
            )
    return "\n".join(lines) + "\n"


def write_profile(profile: Profile, path: Path) -> None:
    """Write a profile to path, creating parent directories.

    Raises:
        ProfileWriteError: If the profile has no mode or the file can't be written.
    """
    if profile.mode is None:
        raise ProfileWriteError.no_mode(str(path))
    content = format_profile(profile)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ProfileWriteError.from_os_error(str(path), e) from e
