"""Maps backend keys to loader factories."""

from typing import Callable, Dict, List

from timelapse_view.core.errors import UnknownBackend
from timelapse_view.scm.base import RevisionLoader

LoaderFactory = Callable[[], RevisionLoader]


class LoaderRegistry:
    """Registry of revision loader factories, keyed by a short name."""

    def __init__(self):
        self._factories: Dict[str, LoaderFactory] = {}

    def register(self, key: str, factory: LoaderFactory) -> None:
        """Register ``factory`` under ``key``, replacing any previous one."""
        self._factories[key] = factory

    def create(self, key: str) -> RevisionLoader:
        """Build a new loader for ``key``."""
        factory = self._factories.get(key)
        if factory is None:
            raise UnknownBackend(key)
        return factory()

    def keys(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, key: object) -> bool:
        return key in self._factories


default_registry = LoaderRegistry()
