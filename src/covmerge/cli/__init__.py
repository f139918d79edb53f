"""CLI package for covmerge."""
