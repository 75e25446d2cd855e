"""Shared fixtures: real git repositories and scripted loaders."""

import tempfile
import threading
from pathlib import Path
from typing import List, Optional

import pytest
from git import Repo

from timelapse_view.core.session import LoadResult, Session
from timelapse_view.models.revision import Revision
from timelapse_view.scm.base import LoadJob, RevisionLoader

BASE_TIME = 1700000000


def commit_file(repo: Repo, rel_path: str, content: str, message: str, tick: int):
    """Write ``content`` to ``rel_path`` and commit it at a fixed time."""
    path = Path(repo.working_tree_dir) / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([rel_path])
    stamp = f"{BASE_TIME + tick * 3600} +0000"
    return repo.index.commit(message, author_date=stamp, commit_date=stamp)


def commit_index(repo: Repo, message: str, tick: int):
    stamp = f"{BASE_TIME + tick * 3600} +0000"
    return repo.index.commit(message, author_date=stamp, commit_date=stamp)


@pytest.fixture
def git_repo():
    """An empty git repository with a configured user."""
    with tempfile.TemporaryDirectory() as temp_dir:
        repo = Repo.init(temp_dir)
        with repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
        yield repo
        repo.close()


@pytest.fixture
def file_history(git_repo):
    """A repository where notes.txt changed three times."""
    commits = [
        commit_file(git_repo, "notes.txt", "one\n", "add notes", 0),
        commit_file(git_repo, "other.txt", "unrelated\n", "add other", 1),
        commit_file(git_repo, "notes.txt", "one\ntwo\n", "second line", 2),
        commit_file(git_repo, "notes.txt", "one\n2\n", "fix second line", 3),
    ]
    return git_repo, commits


def make_revisions(*numbers, prefix: str = "content") -> List[Revision]:
    return [
        Revision(number=n, author="alice", log_message=f"r{n}", text=f"{prefix} {n}\n")
        for n in numbers
    ]


class ScriptedLoader(RevisionLoader):
    """Loader returning canned revisions, optionally held open by a gate."""

    KEY = "scripted"

    def __init__(
        self,
        revisions=(),
        error: Optional[Exception] = None,
        gate: Optional[threading.Event] = None,
    ):
        super().__init__()
        self.revisions = list(revisions)
        self.error = error
        self.gate = gate
        self.started = threading.Event()
        self.cancel_hooks = 0

    def _load(self, job: LoadJob, target: str, limit: int) -> List[Revision]:
        revisions, gate, error = list(self.revisions), self.gate, self.error
        job.set_total_count(len(revisions))
        self.started.set()
        if gate is not None:
            gate.wait(5)
        if error is not None:
            raise error
        return revisions[-limit:]

    def _cancel_hook(self) -> None:
        self.cancel_hooks += 1


class LoadWaiter:
    """Collects the result of one Session.load call."""

    def __init__(self):
        self.results: List[LoadResult] = []
        self.done = threading.Event()

    def __call__(self, result: LoadResult) -> None:
        self.results.append(result)
        self.done.set()

    def wait(self) -> LoadResult:
        assert self.done.wait(5), "load did not finish"
        return self.results[0]


def load_and_wait(session: Session, loader: RevisionLoader, target="file.txt", limit=100):
    waiter = LoadWaiter()
    session.load(loader, target, "", "", limit, waiter)
    return waiter.wait()
