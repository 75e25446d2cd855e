"""Diff result and cache key models."""

from enum import Enum
from typing import List, NamedTuple

from pydantic import BaseModel

from timelapse_view.models.revision import RevisionNumber


class DisplayMode(str, Enum):
    """Which lines a diff shows."""

    FULL = "full"
    DIFFERENCES_ONLY = "differences_only"

    @classmethod
    def of(cls, differences_only: bool) -> "DisplayMode":
        return cls.DIFFERENCES_ONLY if differences_only else cls.FULL


class DiffKey(NamedTuple):
    """Cache key for one comparison."""

    left: RevisionNumber
    right: RevisionNumber
    mode: DisplayMode


class Diff(BaseModel):
    """Line-aligned comparison of two texts."""

    left_text: str
    right_text: str
    left_lines: List[str] = []
    right_lines: List[str] = []
    changed_rows: List[bool] = []
    # First row of each changed region, ascending
    difference_positions: List[int] = []

    @property
    def line_count(self) -> int:
        return len(self.left_lines)

    @property
    def difference_count(self) -> int:
        return len(self.difference_positions)

    def is_changed(self, row: int) -> bool:
        """Whether the aligned row differs between the two sides."""
        return self.changed_rows[row]
