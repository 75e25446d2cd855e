"""Revision loaders for the supported version-control systems."""

from .base import LoadJob, RevisionLoader
from .git_backend import GitBackend
from .registry import LoaderRegistry, default_registry
from .svn_backend import SvnBackend

default_registry.register(GitBackend.KEY, GitBackend)
default_registry.register(SvnBackend.KEY, SvnBackend)


def create_loader(key: str) -> RevisionLoader:
    """Build a loader from the default registry."""
    return default_registry.create(key)


__all__ = [
    "GitBackend",
    "LoadJob",
    "LoaderRegistry",
    "RevisionLoader",
    "SvnBackend",
    "create_loader",
    "default_registry",
]
