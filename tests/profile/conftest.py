"""Shared fixtures for profile tests."""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def profile_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing profile text to a file under tmp_path."""
    counter = 0

    def _write(*lines: str, name: str | None = None) -> Path:
        nonlocal counter
        counter += 1
        path = tmp_path / (name or f"cover-{counter}.out")
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write
