"""Session: the loaded history of one file plus its diff cache."""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from timelapse_view.core.differ import compute_diff
from timelapse_view.core.errors import EmptyHistory, SingleRevision
from timelapse_view.models.diff import Diff, DiffKey, DisplayMode
from timelapse_view.models.revision import Revision
from timelapse_view.scm.base import LoadJob, RevisionLoader

logger = logging.getLogger(__name__)

Differ = Callable[[str, str, bool], Diff]


class LoadResult(BaseModel):
    """Outcome of one ``Session.load`` call, passed to its callback."""

    job: LoadJob
    generation: int
    installed: bool = False
    stale: bool = False
    error: Optional[Exception] = None

    model_config = {"arbitrary_types_allowed": True}


LoadCallback = Callable[[LoadResult], None]


class Session:
    """Owns the active revision list and caches diffs between its revisions.

    Only the most recently started load may replace the revision list. A
    load that finishes after being superseded still reaches its callback,
    with ``stale`` set and nothing installed.
    """

    def __init__(self, loader: Optional[RevisionLoader] = None, differ: Differ = compute_diff):
        self.loader = loader
        self._differ = differ
        self._lock = threading.RLock()
        self._revisions: Tuple[Revision, ...] = ()
        self._diff_cache: Dict[DiffKey, Diff] = {}
        self._generation = 0

    @property
    def revisions(self) -> Tuple[Revision, ...]:
        with self._lock:
            return self._revisions

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._diff_cache)

    def is_cached(self, a: Revision, b: Revision, differences_only: bool) -> bool:
        key = DiffKey(a.number, b.number, DisplayMode.of(differences_only))
        with self._lock:
            return key in self._diff_cache

    def diff(self, a: Revision, b: Revision, differences_only: bool = False) -> Diff:
        """Compare two revisions, caching one result per distinct comparison."""
        key = DiffKey(a.number, b.number, DisplayMode.of(differences_only))
        with self._lock:
            cache = self._diff_cache
            result = cache.get(key)
        if result is not None:
            return result

        # Computed unlocked; an install meanwhile swaps in a fresh cache and
        # this result lands only in the discarded one.
        result = self._differ(a.contents, b.contents, differences_only)
        with self._lock:
            return cache.setdefault(key, result)

    def default_pair(self) -> Tuple[Revision, Revision]:
        """The two newest revisions, older first."""
        revisions = self.revisions
        if len(revisions) < 2:
            raise EmptyHistory("No revisions loaded")
        return revisions[-2], revisions[-1]

    def load(
        self,
        loader: RevisionLoader,
        target: str,
        username: Optional[str] = "",
        password: Optional[str] = "",
        limit: int = 100,
        on_done: Optional[LoadCallback] = None,
    ) -> LoadJob:
        """Start loading ``target`` with ``loader``; returns without blocking.

        The returned job finishes only after its result has been installed
        (or rejected), so waiting on it and then reading ``revisions`` is safe.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        loader.set_credentials(username, password)
        with self._lock:
            self._generation += 1
            generation = self._generation

        def finished(job: LoadJob) -> None:
            result = self._install(loader, job, generation)
            if on_done is not None:
                on_done(result)

        return loader.load_revisions(target, limit, finished)

    def _install(self, loader: RevisionLoader, job: LoadJob, generation: int) -> LoadResult:
        with self._lock:
            if generation != self._generation:
                logger.info(
                    "Discarding superseded load #%d of %s", generation, job.target
                )
                return LoadResult(
                    job=job, generation=generation, stale=True, error=job.error
                )
            if job.error is not None:
                return LoadResult(job=job, generation=generation, error=job.error)

            error = None
            if not job.revisions:
                error = EmptyHistory()
            elif len(job.revisions) == 1:
                error = SingleRevision()
            if error is not None:
                logger.warning("Not installing history of %s: %s", job.target, error)
                return LoadResult(job=job, generation=generation, error=error)

            self._revisions = tuple(job.revisions)
            self._diff_cache = {}
            self.loader = loader
            logger.debug(
                "Installed %d revisions of %s", len(self._revisions), job.target
            )
            return LoadResult(job=job, generation=generation, installed=True)
