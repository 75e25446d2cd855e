"""Time-lapse view of a single file's revision history."""

__version__ = "0.1.0"
