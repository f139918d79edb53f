"""covmerge - merge coverage profiles of self re-executing test processes."""

__version__ = "0.1.0"
