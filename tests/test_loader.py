"""Tests for the asynchronous RevisionLoader contract."""

import threading

import pytest

from conftest import ScriptedLoader, make_revisions
from timelapse_view.core.errors import BackendIOError


def test_load_returns_before_job_finishes():
    gate = threading.Event()
    loader = ScriptedLoader(make_revisions(1, 2, 3), gate=gate)

    job = loader.load_revisions("file.txt", 10)
    assert loader.started.wait(5)

    assert loader.is_loading()
    assert job.is_loading
    assert loader.get_total_count() == 3
    assert loader.get_revisions() == ()

    gate.set()
    assert job.wait(5)
    assert not loader.is_loading()
    assert job.succeeded
    assert [r.number for r in loader.get_revisions()] == [1, 2, 3]


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        ScriptedLoader().load_revisions("file.txt", 0)


def test_completion_callback_runs_once_before_job_is_done():
    loader = ScriptedLoader(make_revisions(1, 2))
    calls = []

    def on_done(job):
        calls.append((job, [r.number for r in job.revisions], job.wait(0)))

    job = loader.load_revisions("file.txt", 5, on_done)
    assert job.wait(5)
    assert calls == [(job, [1, 2], False)]
    assert not loader.is_loading()


def test_cancel_is_idempotent():
    gate = threading.Event()
    loader = ScriptedLoader(make_revisions(1, 2), gate=gate)
    job = loader.load_revisions("file.txt", 5)
    assert loader.started.wait(5)

    loader.cancel()
    loader.cancel()

    assert job.cancelled
    assert loader.cancel_hooks == 1
    gate.set()
    assert job.wait(5)


def test_cancel_without_job_is_harmless():
    loader = ScriptedLoader()
    loader.cancel()
    assert loader.cancel_hooks == 0
    assert loader.get_loaded_count() == 0
    assert loader.get_total_count() == 0


def test_previous_result_visible_while_new_job_runs():
    loader = ScriptedLoader(make_revisions(1, 2))
    assert loader.load_revisions("file.txt", 5).wait(5)

    gate = threading.Event()
    loader.gate = gate
    loader.revisions = make_revisions(8, 9)
    job = loader.load_revisions("file.txt", 5)
    assert job.is_loading
    assert [r.number for r in loader.get_revisions()] == [1, 2]

    gate.set()
    assert job.wait(5)
    assert [r.number for r in loader.get_revisions()] == [8, 9]


def test_unexpected_error_becomes_backend_io_error():
    loader = ScriptedLoader(make_revisions(1, 2), error=RuntimeError("disk on fire"))
    job = loader.load_revisions("file.txt", 5)

    assert job.wait(5)
    assert isinstance(job.error, BackendIOError)
    assert isinstance(job.error.__cause__, RuntimeError)
    assert job.revisions == ()
    assert not job.succeeded


def test_failing_callback_does_not_break_the_job():
    loader = ScriptedLoader(make_revisions(1, 2))

    def on_done(job):
        raise RuntimeError("callback bug")

    job = loader.load_revisions("file.txt", 5, on_done)
    assert job.wait(5)
    assert job.succeeded


def test_older_job_finishing_late_does_not_replace_newer_result():
    gate = threading.Event()
    loader = ScriptedLoader(make_revisions(1, 2), gate=gate)
    older = loader.load_revisions("file.txt", 5)
    assert loader.started.wait(5)

    loader.gate = None
    loader.revisions = make_revisions(8, 9)
    newer = loader.load_revisions("file.txt", 5)
    assert newer.wait(5)
    assert [r.number for r in loader.get_revisions()] == [8, 9]

    gate.set()
    assert older.wait(5)
    assert [r.number for r in older.revisions] == [1, 2]
    assert [r.number for r in loader.get_revisions()] == [8, 9]
