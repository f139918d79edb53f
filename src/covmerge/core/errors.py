"""covmerge error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Profile (parse, read, merge, write)

All profile errors are fatal to a merge session. Merges already applied to
the summary profile are not rolled back.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Profile (3xxx)
    PROFILE_PARSE_ERROR = 3001
    PROFILE_READ_ERROR = 3002
    PROFILE_MODE_MISMATCH = 3003
    PROFILE_COUNT_OVERFLOW = 3004
    PROFILE_WRITE_ERROR = 3005


@dataclass(frozen=True, slots=True)
class CovMergeError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PROFILE_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CovMergeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ProfileParseError(CovMergeError):
    """Malformed coverage profile content."""

    @classmethod
    def bad_line(
        cls, path: str, line_no: int, line: str, expected: str
    ) -> "ProfileParseError":
        return cls(
            code=ErrorCode.PROFILE_PARSE_ERROR,
            message=(
                f"{path}:{line_no}: line {line!r} doesn't match expected format {expected!r}"
            ),
            details={"path": path, "line_no": line_no, "line": line, "expected": expected},
        )

    @classmethod
    def bad_field(
        cls, path: str, line_no: int, line: str, reason: str
    ) -> "ProfileParseError":
        return cls(
            code=ErrorCode.PROFILE_PARSE_ERROR,
            message=f"{path}:{line_no}: invalid field in line {line!r}: {reason}",
            details={"path": path, "line_no": line_no, "line": line, "reason": reason},
        )

    @classmethod
    def undecodable(cls, path: str, reason: str) -> "ProfileParseError":
        return cls(
            code=ErrorCode.PROFILE_PARSE_ERROR,
            message=f"{path}: profile is not valid UTF-8 text: {reason}",
            details={"path": path, "reason": reason},
        )


class ProfileReadError(CovMergeError):
    """An existing profile file could not be opened or read."""

    @classmethod
    def from_os_error(cls, path: str, err: OSError) -> "ProfileReadError":
        reason = err.strerror or str(err)
        return cls(
            code=ErrorCode.PROFILE_READ_ERROR,
            message=f"Unable to merge coverage profile {path!r}: {reason}",
            details={"path": path, "reason": reason, "errno": err.errno},
        )


class ModeMismatchError(CovMergeError):
    """Two merged profiles declare different counting modes."""

    @classmethod
    def between(cls, expected: str, got: str, path: str | None = None) -> "ModeMismatchError":
        where = f" in {path!r}" if path else ""
        return cls(
            code=ErrorCode.PROFILE_MODE_MISMATCH,
            message=f"Expected mode {expected!r}, got mode {got!r}{where}",
            details={"expected": expected, "got": got, "path": path},
        )


class CountOverflowError(CovMergeError):
    """Summed execution counts exceed the 32-bit count field."""

    @classmethod
    def at(cls, source: str, location: tuple[int, int, int, int], total: int) -> "CountOverflowError":
        sl, sc, el, ec = location
        return cls(
            code=ErrorCode.PROFILE_COUNT_OVERFLOW,
            message=f"Execution count overflow at {source}:{sl}.{sc},{el}.{ec}: {total}",
            details={"source": source, "location": list(location), "total": total},
        )


class ProfileWriteError(CovMergeError):
    """A summary profile could not be serialized or written."""

    @classmethod
    def no_mode(cls, path: str) -> "ProfileWriteError":
        return cls(
            code=ErrorCode.PROFILE_WRITE_ERROR,
            message=f"Cannot write profile without a mode to {path!r}",
            details={"path": path},
        )

    @classmethod
    def from_os_error(cls, path: str, err: OSError) -> "ProfileWriteError":
        reason = err.strerror or str(err)
        return cls(
            code=ErrorCode.PROFILE_WRITE_ERROR,
            message=f"Unable to write coverage profile {path!r}: {reason}",
            details={"path": path, "reason": reason, "errno": err.errno},
        )

