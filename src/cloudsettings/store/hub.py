"""HTTP client storing cloud variables on a remote hub.

Endpoints:
    GET /cloud/variables/{key}   -> {"value": "<blob>"}
    PUT /cloud/variables/{key}   <- {"value": "<blob>"}
"""

import logging
from dataclasses import dataclass
from typing import Optional, Type
from urllib.parse import quote, urlparse, urlunparse

import httpx

from ..errors import StoreError, StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


def _normalize_hub_url(url: str) -> str:
    """Normalize the hub base URL.

    The client expects a base URL at the server root (no /api suffix).
    URLs like https://host/api or https://host/api/v1 are reduced to
    https://host.
    """
    raw = (url or "").strip()
    if not raw:
        return raw

    parsed = urlparse(raw)
    path = (parsed.path or "").rstrip("/")
    if path in {"/api", "/api/v1"}:
        parsed = parsed._replace(path="")

    return urlunparse(parsed).rstrip("/")


@dataclass
class HubStoreConfig:
    """Configuration for the hub connection."""
    url: str
    token: str
    timeout: float = 30.0

    def __post_init__(self) -> None:
        self.url = _normalize_hub_url(self.url)


class HubVariableStore:
    """Cloud variable store backed by the hub's HTTP API.

    Calls block until the hub answers or ``config.timeout`` expires.
    """

    def __init__(self, config: HubStoreConfig):
        self.config = config
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.config.url,
                headers={"Authorization": f"Bearer {self.config.token}"},
                timeout=self.config.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
        self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def read_variable(self, key: str) -> str:
        """Fetch a variable's blob.

        Raises:
            StoreReadError: If the variable is missing or the hub is unreachable.
        """
        try:
            response = self.client.get(self._path(key))
        except httpx.RequestError as e:
            raise StoreReadError(key, f"request failed: {e}") from e

        self._check_response(response, key, StoreReadError)

        try:
            value = response.json()["value"]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreReadError(
                key, "malformed hub response", response.status_code
            ) from e
        if not isinstance(value, str):
            raise StoreReadError(
                key, f"expected a string value, got {type(value).__name__}",
                response.status_code,
            )
        return value

    def write_variable(self, key: str, value: str) -> None:
        """Store a variable's blob.

        Raises:
            StoreWriteError: If the hub rejects the write or is unreachable.
        """
        try:
            response = self.client.put(self._path(key), json={"value": value})
        except httpx.RequestError as e:
            raise StoreWriteError(key, f"request failed: {e}") from e

        self._check_response(response, key, StoreWriteError)
        logger.debug(f"Wrote cloud variable '{key}' to hub")

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _path(key: str) -> str:
        return f"/cloud/variables/{quote(key, safe='')}"

    @staticmethod
    def _check_response(
        response: httpx.Response, key: str, error_type: Type[StoreError]
    ) -> None:
        """Raise ``error_type`` for 4xx/5xx responses."""
        if response.status_code < 400:
            return

        try:
            detail = response.json().get("detail", response.text)
        except Exception:
            detail = response.text

        if response.status_code >= 500:
            reason = f"hub server error: {detail}"
        else:
            reason = f"hub API error: {detail}"
        raise error_type(key, reason, response.status_code)
