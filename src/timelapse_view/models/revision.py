"""Revision model: one snapshot of a tracked file."""

from typing import Callable, Dict, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr

from timelapse_view.core.errors import ContentUnavailable

RevisionNumber = Union[int, str]


class Revision(BaseModel):
    """A file's contents and commit metadata at one point in its history.

    ``number`` is an increasing integer for linear backends and an opaque
    commit id for graph backends; it is an identifier, never a sort key.
    Contents are either materialized up front (``text``) or produced on
    first access by ``content_loader``.
    """

    number: RevisionNumber
    author: str = ""
    date: str = ""
    log_message: str = ""
    path: Optional[str] = None
    text: Optional[str] = None
    content_loader: Optional[Callable[[], str]] = Field(
        default=None, exclude=True, repr=False
    )

    _loaded: Dict[str, Optional[str]] = PrivateAttr(default_factory=dict)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def read_contents(self) -> Optional[str]:
        """Return the file contents, or None if they cannot be read."""
        if self.text is not None:
            return self.text
        if self.content_loader is None:
            return None
        if "contents" not in self._loaded:
            try:
                self._loaded["contents"] = self.content_loader()
            except ContentUnavailable:
                self._loaded["contents"] = None
        return self._loaded["contents"]

    @property
    def contents(self) -> str:
        """Contents for display; empty when unavailable."""
        return self.read_contents() or ""

    @property
    def summary(self) -> str:
        """First line of the log message."""
        lines = self.log_message.strip().splitlines()
        return lines[0] if lines else ""
