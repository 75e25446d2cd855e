"""Graph-based backend reading history from a local git repository."""

import heapq
import itertools
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from git import Repo
from git.exc import BadObject, GitError, InvalidGitRepositoryError, NoSuchPathError
from git.objects import Blob, Commit, Tree

from timelapse_view.core.errors import (
    ContentUnavailable,
    TargetResolutionError,
    UnsupportedDirectoryTarget,
)
from timelapse_view.models.revision import Revision
from timelapse_view.scm.base import LoadJob, RevisionLoader
from timelapse_view.scm.encoding import decode_contents

logger = logging.getLogger(__name__)


def find_blob(tree: Tree, path: str) -> Optional[Blob]:
    """Walk ``tree`` down to the blob at ``path`` (slash separated)."""
    head, _, rest = path.partition("/")
    for item in tree:
        if item.name != head:
            continue
        if rest:
            return find_blob(item, rest) if item.type == "tree" else None
        return item if item.type == "blob" else None
    return None


def _same_blob(a: Optional[Blob], b: Optional[Blob]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a.binsha == b.binsha


def content_loader(repo: Repo, binsha: bytes) -> Callable[[], str]:
    """Build a loader reading one blob from the object database."""

    def load() -> str:
        try:
            data = repo.odb.stream(binsha).read()
        except (BadObject, GitError, ValueError, OSError) as e:
            raise ContentUnavailable(f"Cannot read object {binsha.hex()}: {e}") from e
        return decode_contents(data, default="utf-8")

    return load


class GitBackend(RevisionLoader):
    """Loads revisions of one file by walking a git commit graph."""

    KEY = "git"

    def resolve(self, target: str) -> Tuple[Repo, str]:
        """Open the repository holding ``target`` and return its repo path."""
        path = Path(target).expanduser().resolve()

        search_from = path
        while not search_from.exists() and search_from != search_from.parent:
            search_from = search_from.parent
        if search_from.is_file():
            search_from = search_from.parent

        try:
            repo = Repo(search_from, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise TargetResolutionError(f"No git repository found for {target}") from e
        if repo.bare or repo.working_tree_dir is None:
            raise TargetResolutionError(f"{repo.git_dir} is a bare repository")

        work_tree = Path(repo.working_tree_dir).resolve()
        try:
            relative = path.relative_to(work_tree)
        except ValueError as e:
            raise TargetResolutionError(f"{target} is outside {work_tree}") from e

        repo_path = relative.as_posix()
        if repo_path in ("", "."):
            raise UnsupportedDirectoryTarget(
                f"Cannot time-lapse view directory {work_tree}"
            )
        return repo, repo_path

    def _rename_source(self, parent: Commit, commit: Commit, path: str) -> Optional[str]:
        """Path ``path`` had in ``parent`` if ``commit`` renamed it."""
        for change in parent.diff(commit, M=True):
            if change.renamed_file and change.rename_to == path:
                return change.rename_from
        return None

    def walk(
        self, repo: Repo, job: LoadJob, path: str, limit: int
    ) -> List[Tuple[Commit, str, Blob]]:
        """Find up to ``limit`` commits that changed ``path``, newest first.

        Commits are visited in committer-time order. A commit whose blob at
        the tracked path matches one of its parents is skipped and only that
        parent is followed; renames are followed under the parent's name.
        """
        try:
            head = repo.head.commit
        except ValueError as e:
            raise TargetResolutionError(f"{repo.working_tree_dir} has no commits") from e

        order = itertools.count()
        queue: list = []
        seen = set()

        def push(commit: Commit, commit_path: str) -> None:
            if commit.binsha in seen:
                return
            seen.add(commit.binsha)
            heapq.heappush(
                queue, (-commit.committed_date, next(order), commit, commit_path)
            )

        push(head, path)
        found: List[Tuple[Commit, str, Blob]] = []
        while queue and len(found) < limit:
            if job.cancelled:
                break
            _, _, commit, commit_path = heapq.heappop(queue)
            blob = find_blob(commit.tree, commit_path)

            parents = []
            for parent in commit.parents:
                parent_path = commit_path
                parent_blob = find_blob(parent.tree, commit_path)
                if parent_blob is None and blob is not None:
                    renamed = self._rename_source(parent, commit, commit_path)
                    if renamed is not None:
                        parent_path = renamed
                        parent_blob = find_blob(parent.tree, renamed)
                parents.append((parent, parent_path, parent_blob))

            if blob is None and all(b is None for _, _, b in parents):
                continue

            unchanged = [(p, pp) for p, pp, pb in parents if _same_blob(pb, blob)]
            if unchanged:
                push(*unchanged[0])
                continue

            if blob is not None:
                found.append((commit, commit_path, blob))
            for parent, parent_path, parent_blob in parents:
                if parent_blob is not None:
                    push(parent, parent_path)

        return found

    def _load(self, job: LoadJob, target: str, limit: int) -> List[Revision]:
        job.set_loaded_count(1)
        job.set_total_count(1)
        repo, repo_path = self.resolve(target)
        logger.debug("Walking history of %s in %s", repo_path, repo.working_tree_dir)

        commits = self.walk(repo, job, repo_path, limit)
        job.set_total_count(len(commits))

        revisions: List[Revision] = []
        for index, (commit, commit_path, blob) in enumerate(commits, start=1):
            committer = commit.committer
            revisions.insert(
                0,
                Revision(
                    number=commit.hexsha,
                    author=f"{committer.name} <{committer.email}>",
                    date=commit.committed_datetime.strftime("%Y-%m-%d %H:%M"),
                    log_message=commit.message,
                    path=commit_path,
                    content_loader=content_loader(repo, blob.binsha),
                ),
            )
            job.set_loaded_count(index)
        return revisions
