"""Shared fixtures for config tests."""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Remove COVMERGE__* env vars for clean tests."""
    orig = {k: v for k, v in os.environ.items() if k.startswith("COVMERGE__")}
    for k in orig:
        del os.environ[k]
    yield
    # Clean up any new COVMERGE__* env vars set during the test
    for k in [k for k in os.environ if k.startswith("COVMERGE__")]:
        del os.environ[k]
    os.environ.update(orig)


@pytest.fixture
def no_global_config(tmp_path: Path) -> Generator[Path, None, None]:
    """Point the global config at a file that doesn't exist."""
    path = tmp_path / "global" / "config.yaml"
    with patch("covmerge.config.loader.GLOBAL_CONFIG_PATH", path):
        yield path
