"""Line differ producing side-by-side aligned rows."""

import difflib
from typing import List

from timelapse_view.models.diff import Diff


def compute_diff(left_text: str, right_text: str, differences_only: bool = False) -> Diff:
    """Align the lines of two texts and record where changed regions start.

    In differences-only mode unchanged rows are dropped and consecutive
    changed regions are separated by one blank row.
    """
    left = left_text.splitlines()
    right = right_text.splitlines()
    matcher = difflib.SequenceMatcher(None, left, right, autojunk=False)

    left_lines: List[str] = []
    right_lines: List[str] = []
    changed_rows: List[bool] = []
    positions: List[int] = []

    def append(left_line: str, right_line: str, changed: bool) -> None:
        left_lines.append(left_line)
        right_lines.append(right_line)
        changed_rows.append(changed)

    in_region = False
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            in_region = False
            if not differences_only:
                for i, j in zip(range(i1, i2), range(j1, j2)):
                    append(left[i], right[j], False)
            continue

        if not in_region:
            if differences_only and positions:
                append("", "", False)
            positions.append(len(left_lines))
            in_region = True

        for k in range(max(i2 - i1, j2 - j1)):
            append(
                left[i1 + k] if i1 + k < i2 else "",
                right[j1 + k] if j1 + k < j2 else "",
                True,
            )

    return Diff(
        left_text=left_text,
        right_text=right_text,
        left_lines=left_lines,
        right_lines=right_lines,
        changed_rows=changed_rows,
        difference_positions=positions,
    )
