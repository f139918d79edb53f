"""Profile format constants.

This module contains values fixed by the coverage profile format itself.
They are not user-configurable.

For configurable values, see models.py (MergeConfig, LoggingConfig).
"""

# =============================================================================
# Field Widths
# =============================================================================
# Line numbers and execution counts are 32-bit unsigned, columns and
# statement counts 16-bit unsigned.

UINT16_MAX = 0xFFFF
"""Largest column or statement count a profile line may carry."""

UINT32_MAX = 0xFFFF_FFFF
"""Largest line number or execution count a profile line may carry."""

# =============================================================================
# Modes
# =============================================================================

MODE_SET = "set"
MODE_COUNT = "count"
MODE_ATOMIC = "atomic"

# =============================================================================
# Grammar
# =============================================================================
# Human-readable forms quoted in parse error diagnostics.

MODE_LINE_GRAMMAR = "mode: <atomic|count|set>"
BLOCK_LINE_GRAMMAR = "<path>:<startLine>.<startCol>,<endLine>.<endCol> <numStmts> <count>"

# =============================================================================
# Config Locations
# =============================================================================

CONFIG_FILE_NAME = ".covmerge.yaml"
"""Per-project config file, looked up in the project root."""
