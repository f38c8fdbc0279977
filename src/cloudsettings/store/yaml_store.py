"""YAML file storage for cloud variables.

All variables live in a single YAML mapping of key to serialized blob:

    U-alice.audio: '{"Volume": 0.5, "Muted": false}'
    U-alice.video: '{"Fov": 90}'
"""

import logging
import threading
from pathlib import Path
from typing import Dict

import yaml

from ..errors import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


class YamlVariableStore:
    """Cloud variable store backed by a local YAML file."""

    def __init__(self, path: Path):
        """Initialize YAML storage.

        Args:
            path: Path to the YAML file. Created on first write.
        """
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Get the storage file path."""
        return self._path

    def read_variable(self, key: str) -> str:
        """Read one variable.

        Raises:
            StoreReadError: If the file or key is missing, or the file is unreadable.
        """
        with self._lock:
            data = self._load(key)
        if key not in data:
            raise StoreReadError(key, f"not present in {self._path}", status_code=404)
        return str(data[key])

    def write_variable(self, key: str, value: str) -> None:
        """Set one variable (loads, modifies, saves).

        The file is replaced atomically: content is written to a sibling
        ``.tmp`` file first, so a failed write leaves the old file intact.

        Raises:
            StoreWriteError: If the file cannot be read back or written.
        """
        with self._lock:
            try:
                data = self._load(key)
            except StoreReadError as e:
                raise StoreWriteError(key, e.details.get("reason", str(e))) from e
            data[key] = value

            temp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            try:
                content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
                self._path.parent.mkdir(parents=True, exist_ok=True)
                temp_path.write_text(content, encoding="utf-8")
                temp_path.replace(self._path)
            except (OSError, yaml.YAMLError) as e:
                if temp_path.exists():
                    temp_path.unlink()
                raise StoreWriteError(key, str(e)) from e
        logger.debug(f"Wrote cloud variable '{key}' to {self._path}")

    def _load(self, key: str) -> Dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load cloud variables from {self._path}: {e}")
            raise StoreReadError(key, f"{self._path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreReadError(key, f"{self._path} does not contain a mapping")
        return data
