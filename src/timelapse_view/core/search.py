"""Free-text search across the two sides of a diff."""

from typing import List, Optional, Tuple

SIDES = ("left", "right")


class Searcher:
    """Finds successive case-insensitive matches, left side first.

    Each call to ``search`` continues after the previous match and wraps
    around to the first match once the right side is exhausted.
    """

    def __init__(self, left_text: str, right_text: str):
        self._texts = {"left": left_text, "right": right_text}
        self.side: Optional[str] = None
        self.position = -1

    def _matches(self, query: str) -> List[Tuple[int, int]]:
        matches = []
        needle = query.lower()
        for side_index, side in enumerate(SIDES):
            haystack = self._texts[side].lower()
            start = haystack.find(needle)
            while start != -1:
                matches.append((side_index, start))
                start = haystack.find(needle, start + 1)
        return matches

    def search(self, query: str) -> bool:
        """Advance to the next match of ``query``; False if there is none."""
        if not query:
            return False
        matches = self._matches(query)
        if not matches:
            return False

        cursor = (SIDES.index(self.side), self.position) if self.side else (-1, -1)
        side_index, position = next((m for m in matches if m > cursor), matches[0])
        self.side = SIDES[side_index]
        self.position = position
        return True

    @property
    def line(self) -> Optional[int]:
        """Zero-based line of the current match."""
        if self.side is None:
            return None
        return self._texts[self.side].count("\n", 0, self.position)
