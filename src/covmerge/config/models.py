"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVMERGE__SECTION__KEY)
3. Project YAML (.covmerge.yaml)
4. Global YAML (~/.config/covmerge/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVMERGE__<SECTION>__<KEY>=<VALUE>

Examples:
    COVMERGE__LOGGING__LEVEL=DEBUG
    COVMERGE__MERGE__OUTPUT_DIR=/tmp/coverage
    COVMERGE__MERGE__OVERFLOW=error
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OverflowPolicy = Literal["saturate", "error"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVMERGE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every parsed profile and merged source.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class MergeConfig(BaseModel):
    """Merge session configuration.

    Env vars:
        COVMERGE__MERGE__OUTPUT_DIR: Directory relative profile names resolve into
        COVMERGE__MERGE__OVERFLOW: Count overflow policy (saturate, error)
    """

    output_dir: str | None = Field(
        default=None,
        description="Directory that relative profile names are resolved against. "
        "Absolute profile paths are never relocated.",
    )
    overflow: OverflowPolicy = Field(
        default="saturate",
        description="What to do when summed execution counts exceed 2**32-1. "
        "'saturate' clamps and logs a warning, 'error' aborts the merge.",
    )

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        return str(Path(v).expanduser())


class CovMergeConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
