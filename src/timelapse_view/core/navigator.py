"""Stepping between the changed regions of a diff."""

from typing import Optional, Sequence

from timelapse_view.models.diff import Diff


def next_position(line: int, positions: Sequence[int]) -> Optional[int]:
    """First changed-line position after ``line``, or None."""
    if not positions:
        return None
    threshold = line + 0.5
    for position in positions:
        if position > threshold:
            return position
    return None


def previous_position(line: int, positions: Sequence[int]) -> Optional[int]:
    """Last changed-line position before ``line``, or None."""
    if not positions:
        return None
    threshold = line - 0.5
    for position in reversed(positions):
        if position < threshold:
            return position
    return None


class DiffNavigator:
    """Tracks a cursor line within the current diff."""

    def __init__(self):
        self.diff: Optional[Diff] = None
        self.line = 0

    def set_diff(self, diff: Diff, line: int = 0) -> None:
        self.diff = diff
        self.line = line

    @property
    def positions(self) -> Sequence[int]:
        return self.diff.difference_positions if self.diff else ()

    @property
    def difference_count(self) -> int:
        return len(self.positions)

    @property
    def difference_label(self) -> str:
        n = self.difference_count
        return f"{n} difference{'' if n == 1 else 's'}"

    def goto_next(self) -> Optional[int]:
        """Move to the next change; the cursor stays put if there is none."""
        position = next_position(self.line, self.positions)
        if position is not None:
            self.line = position
        return position

    def goto_previous(self) -> Optional[int]:
        position = previous_position(self.line, self.positions)
        if position is not None:
            self.line = position
        return position
