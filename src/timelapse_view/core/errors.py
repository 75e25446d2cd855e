"""Error types raised while loading and comparing revisions."""


class TimelapseError(Exception):
    """Base class for all timelapse-view errors."""


class UnknownBackend(TimelapseError, KeyError):
    """No backend is registered under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown scm loader {key!r}")

    def __str__(self) -> str:
        return self.args[0]


class TargetResolutionError(TimelapseError):
    """The target could not be resolved to a file in a repository."""


class UnsupportedDirectoryTarget(TimelapseError):
    """The target names a repository root rather than a tracked file."""


class HistoryValidationError(TimelapseError):
    """A load finished but its history cannot be diffed."""


class EmptyHistory(HistoryValidationError):
    def __init__(self, message: str = "No revisions found"):
        super().__init__(message)


class SingleRevision(HistoryValidationError):
    def __init__(self, message: str = "Only one revision found"):
        super().__init__(message)


class ContentUnavailable(TimelapseError):
    """The contents of one revision could not be read."""


class BackendIOError(TimelapseError):
    """Network, disk or subprocess failure while talking to a repository."""
