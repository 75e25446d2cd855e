"""Tests for the Revision model."""

import pytest
from pydantic import ValidationError

from timelapse_view.core.errors import ContentUnavailable
from timelapse_view.models.revision import Revision


def test_eager_text_wins():
    revision = Revision(number=3, text="hello\n", content_loader=lambda: "ignored")
    assert revision.read_contents() == "hello\n"


def test_loader_runs_once():
    calls = []

    def loader():
        calls.append(1)
        return "lazy\n"

    revision = Revision(number="abc123", content_loader=loader)

    assert revision.contents == "lazy\n"
    assert revision.read_contents() == "lazy\n"
    assert calls == [1]


def test_unavailable_contents_are_none_and_remembered():
    calls = []

    def loader():
        calls.append(1)
        raise ContentUnavailable("gone")

    revision = Revision(number="abc123", content_loader=loader)

    assert revision.read_contents() is None
    assert revision.read_contents() is None
    assert revision.contents == ""
    assert calls == [1]


def test_revision_is_immutable():
    revision = Revision(number=1, author="alice")
    with pytest.raises(ValidationError):
        revision.author = "mallory"


def test_numbers_keep_their_type():
    assert Revision(number=12).number == 12
    assert Revision(number="0a1b").number == "0a1b"


def test_summary_is_first_message_line():
    revision = Revision(number=1, log_message="\nFix parser\n\nLonger text\n")
    assert revision.summary == "Fix parser"
