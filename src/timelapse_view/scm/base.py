"""Backend-agnostic revision loading.

A loader runs one retrieval job at a time on a background thread. Callers
poll progress through ``is_loading``/``get_loaded_count``/``get_total_count``
and receive the finished ``LoadJob`` through the completion callback.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from timelapse_view.core.errors import BackendIOError, TimelapseError
from timelapse_view.models.revision import Revision

logger = logging.getLogger(__name__)

DoneCallback = Callable[["LoadJob"], None]


class LoadJob:
    """State of one in-flight (or finished) revision retrieval."""

    def __init__(self, target: str, limit: int, generation: int):
        self.target = target
        self.limit = limit
        self.generation = generation
        self.revisions: Tuple[Revision, ...] = ()
        self.error: Optional[Exception] = None
        self._lock = threading.Lock()
        self._loaded_count = 0
        self._total_count = 0
        self._cancelled = threading.Event()
        self._done = threading.Event()

    @property
    def loaded_count(self) -> int:
        return self._loaded_count

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_loading(self) -> bool:
        return not self._done.is_set()

    @property
    def succeeded(self) -> bool:
        return self._done.is_set() and self.error is None

    def set_total_count(self, count: int) -> None:
        with self._lock:
            self._total_count = max(self._total_count, count)

    def set_loaded_count(self, count: int) -> None:
        with self._lock:
            self._loaded_count = max(self._loaded_count, count)

    def increment_loaded(self) -> None:
        with self._lock:
            self._loaded_count += 1

    def cancel(self) -> bool:
        """Request a cooperative stop. Returns False if already requested."""
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the job finishes; False on timeout."""
        return self._done.wait(timeout)

    def _complete(self, revisions: Tuple[Revision, ...], error: Optional[Exception]):
        self.revisions = revisions
        self.error = error

    def _mark_done(self) -> None:
        self._done.set()


class RevisionLoader(ABC):
    """Retrieves the history of one file from one kind of repository."""

    KEY = ""

    def __init__(self):
        self.username = ""
        self.password = ""
        self._lock = threading.Lock()
        self._job: Optional[LoadJob] = None
        self._generation = 0
        self._revisions: Tuple[Revision, ...] = ()
        self._revisions_generation = 0

    def set_credentials(self, username: Optional[str], password: Optional[str]):
        """Set credentials for the next load; None means anonymous."""
        self.username = username or ""
        self.password = password or ""

    def load_revisions(
        self, target: str, limit: int, on_done: Optional[DoneCallback] = None
    ) -> LoadJob:
        """Start loading up to ``limit`` revisions of ``target``.

        Returns immediately. ``on_done`` is called exactly once, from the
        worker thread, with the finished job's results in place. The job
        only stops loading once ``on_done`` has returned, so ``on_done``
        must not wait on it.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        with self._lock:
            self._generation += 1
            job = LoadJob(target, limit, self._generation)
            self._job = job

        logger.debug("Starting %s load #%d of %s", self.KEY, job.generation, target)
        thread = threading.Thread(
            target=self._run,
            args=(job, on_done),
            name=f"{self.KEY or 'scm'}-loader-{job.generation}",
            daemon=True,
        )
        thread.start()
        return job

    def _run(self, job: LoadJob, on_done: Optional[DoneCallback]) -> None:
        revisions: Tuple[Revision, ...] = ()
        error: Optional[Exception] = None
        try:
            revisions = tuple(self._load(job, job.target, job.limit))
        except TimelapseError as e:
            logger.warning("Could not load %s: %s", job.target, e)
            error = e
        except Exception as e:
            logger.exception("Unexpected error loading %s", job.target)
            error = BackendIOError(f"{type(e).__name__}: {e}")
            error.__cause__ = e

        with self._lock:
            if job.generation >= self._revisions_generation:
                self._revisions = revisions
                self._revisions_generation = job.generation
        job._complete(revisions, error)
        logger.info(
            "Finished %s load #%d of %s: %d revisions%s",
            self.KEY,
            job.generation,
            job.target,
            len(revisions),
            " (cancelled)" if job.cancelled else "",
        )

        try:
            if on_done is not None:
                on_done(job)
        except Exception:
            logger.exception("Load completion handler failed for %s", job.target)
        finally:
            job._mark_done()

    @abstractmethod
    def _load(self, job: LoadJob, target: str, limit: int) -> List[Revision]:
        """Retrieve revisions oldest-first, checking ``job.cancelled``."""

    def _cancel_hook(self) -> None:
        """Called once when the current job is cancelled."""

    def cancel(self) -> None:
        """Ask the current job to stop. Safe to call repeatedly."""
        job = self._job
        if job is not None and job.cancel():
            self._cancel_hook()

    @property
    def current_job(self) -> Optional[LoadJob]:
        return self._job

    def is_loading(self) -> bool:
        job = self._job
        return job is not None and job.is_loading

    def get_loaded_count(self) -> int:
        job = self._job
        return job.loaded_count if job else 0

    def get_total_count(self) -> int:
        job = self._job
        return job.total_count if job else 0

    def get_revisions(self) -> Tuple[Revision, ...]:
        """Revisions of the most recently finished job, oldest first."""
        with self._lock:
            return self._revisions
