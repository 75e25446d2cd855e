"""JSON-backed user settings."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SHOW_DIFFERENCES_ONLY = "show_differences_only"


def default_config_path() -> Path:
    return Path.home() / ".timelapse-view.json"


class Configuration:
    """Settings persisted to a JSON file, saved on every change."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_config_path()
        self._values = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            values = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", self.path, e)
            return {}
        if not isinstance(values, dict):
            logger.warning("Ignoring config file %s: not a JSON object", self.path)
            return {}
        return values

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value
        self.save()

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self._values.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return default

    def set_bool(self, name: str, value: bool) -> None:
        self.set(name, bool(value))

    def get_int(self, name: str, default: int) -> int:
        value = self._values.get(name)
        try:
            return int(value) if value is not None else default
        except (TypeError, ValueError):
            return default
