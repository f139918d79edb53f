"""Core module exports."""

from covmerge.core.errors import (
    ConfigError,
    CountOverflowError,
    CovMergeError,
    ErrorCode,
    ModeMismatchError,
    ProfileParseError,
    ProfileReadError,
    ProfileWriteError,
)
from covmerge.core.logging import (
    clear_session_id,
    configure_logging,
    get_logger,
    get_session_id,
    set_session_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "CountOverflowError",
    "CovMergeError",
    "ErrorCode",
    "ModeMismatchError",
    "ProfileParseError",
    "ProfileReadError",
    "ProfileWriteError",
    # Logging
    "clear_session_id",
    "configure_logging",
    "get_logger",
    "get_session_id",
    "set_session_id",
]
