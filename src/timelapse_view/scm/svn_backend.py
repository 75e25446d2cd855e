"""Linear-revision backend driving the ``svn`` command-line client."""

import logging
import os
import subprocess
from typing import Callable, List, Optional
from urllib.parse import urlparse
from xml.etree import ElementTree

from pydantic import BaseModel

from timelapse_view.core.errors import BackendIOError, TargetResolutionError
from timelapse_view.models.revision import Revision
from timelapse_view.scm.base import LoadJob, RevisionLoader
from timelapse_view.scm.encoding import decode_contents, format_svn_date

logger = logging.getLogger(__name__)


class SvnLogEntry(BaseModel):
    """One revision that touched the target file."""

    revision: int
    author: str = ""
    date: str = ""
    message: str = ""


class SvnClient:
    """Runs svn commands and parses their XML output."""

    def __init__(self, username: str = "", password: str = "", executable: str = "svn"):
        self.username = username
        self.password = password
        self.executable = executable

    def _command(self, args: List[str]) -> List[str]:
        cmd = [self.executable, "--non-interactive", "--no-auth-cache"]
        if self.username:
            cmd += ["--username", self.username]
        if self.password:
            cmd += ["--password", self.password]
        return cmd + args

    def run(self, args: List[str]) -> bytes:
        """Run an svn subcommand and return its raw stdout."""
        try:
            result = subprocess.run(  # noqa: S603
                self._command(args), capture_output=True, check=False
            )
        except OSError as e:
            raise BackendIOError(f"Could not run {self.executable}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise BackendIOError(f"svn {args[0]} failed: {stderr}")
        return result.stdout

    def _xml(self, args: List[str]) -> ElementTree.Element:
        output = self.run(args)
        try:
            return ElementTree.fromstring(output)
        except ElementTree.ParseError as e:
            raise BackendIOError(f"Unreadable output from svn {args[0]}: {e}") from e

    def info_url(self, path: str) -> str:
        """Repository URL of a working-copy path."""
        root = self._xml(["info", "--xml", path])
        url = root.findtext("entry/url")
        if not url:
            raise BackendIOError(f"svn info returned no URL for {path}")
        return url

    def file_revisions(self, url: str) -> List[SvnLogEntry]:
        """Revisions that changed ``url``, oldest first."""
        root = self._xml(["log", "--xml", "-r", "1:HEAD", url])
        entries = []
        for node in root.iter("logentry"):
            entries.append(
                SvnLogEntry(
                    revision=int(node.get("revision")),
                    author=node.findtext("author") or "",
                    date=node.findtext("date") or "",
                    message=node.findtext("msg") or "",
                )
            )
        return entries

    def cat(self, url: str, revision: int) -> bytes:
        """Raw contents of ``url`` as of ``revision``."""
        return self.run(["cat", "-r", str(revision), url])


ClientFactory = Callable[[str, str], SvnClient]


class SvnBackend(RevisionLoader):
    """Loads revisions from a Subversion repository."""

    KEY = "svn"

    def __init__(self, client_factory: Optional[ClientFactory] = None):
        super().__init__()
        self._client_factory = client_factory or SvnClient

    def resolve_url(self, client: SvnClient, target: str) -> str:
        """Turn a working-copy path or URL into a repository URL."""
        if os.path.exists(target):
            try:
                return client.info_url(target)
            except BackendIOError as e:
                raise TargetResolutionError(
                    f"{target} is not an svn working copy: {e}"
                ) from e

        parsed = urlparse(target)
        if not parsed.scheme or not (parsed.netloc or parsed.path):
            raise TargetResolutionError(f"{target} is neither a file nor an svn URL")
        return target

    def _load(self, job: LoadJob, target: str, limit: int) -> List[Revision]:
        client = self._client_factory(self.username, self.password)
        url = self.resolve_url(client, target)
        logger.debug("Resolved %s to %s", target, url)

        history = client.file_revisions(url)
        newest_first = list(reversed(history))[:limit]
        job.set_total_count(len(newest_first))

        revisions = []
        for entry in newest_first:
            if job.cancelled:
                break
            data = client.cat(url, entry.revision)
            revisions.append(
                Revision(
                    number=entry.revision,
                    author=entry.author,
                    date=format_svn_date(entry.date),
                    log_message=entry.message,
                    path=url,
                    text=decode_contents(data),
                )
            )
            job.increment_loaded()

        revisions.reverse()
        return revisions
