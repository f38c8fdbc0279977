"""Dict-backed cloud variable store for tests and offline use."""

import threading
from typing import Dict, Optional

from ..errors import StoreReadError


class InMemoryVariableStore:
    """Keeps variables in a process-local dict."""

    def __init__(self, variables: Optional[Dict[str, str]] = None):
        self._variables: Dict[str, str] = dict(variables or {})
        self._lock = threading.Lock()

    @property
    def variables(self) -> Dict[str, str]:
        """Snapshot of all stored variables."""
        with self._lock:
            return dict(self._variables)

    def read_variable(self, key: str) -> str:
        with self._lock:
            if key not in self._variables:
                raise StoreReadError(key, "variable does not exist", status_code=404)
            return self._variables[key]

    def write_variable(self, key: str, value: str) -> None:
        with self._lock:
            self._variables[key] = value

    def delete_variable(self, key: str) -> None:
        with self._lock:
            self._variables.pop(key, None)
