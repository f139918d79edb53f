"""Config module exports."""

from covmerge.config.loader import load_config
from covmerge.config.models import (
    CovMergeConfig,
    LoggingConfig,
    LogOutputConfig,
    MergeConfig,
)

__all__ = [
    "load_config",
    "CovMergeConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "MergeConfig",
]
