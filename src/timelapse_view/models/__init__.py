"""Data models for timelapse-view."""

from .diff import Diff, DiffKey, DisplayMode
from .revision import Revision, RevisionNumber

__all__ = ["Revision", "RevisionNumber", "Diff", "DiffKey", "DisplayMode"]
