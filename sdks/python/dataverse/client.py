"""Dataverse Python client."""

import logging
from typing import Any, Callable, Dict, Optional, Union

import httpx

from .config import DataverseConfig
from .dataset import DatasetApi
from .exceptions import (
    AuthenticationError,
    ConflictError,
    NetworkError,
    RemoteError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class DataverseClient:
    """Dataverse native API client."""

    def __init__(self, config: DataverseConfig = None, transport: httpx.BaseTransport = None):
        """Initialize the Dataverse client.

        Args:
            config: Connection settings and polling defaults
            transport: Optional httpx transport, e.g. for tests
        """
        self.config = config or DataverseConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self.client = httpx.Client(
            headers={"X-Dataverse-key": self.config.api_token} if self.config.api_token else {},
            timeout=self.config.timeout,
            transport=transport,
        )

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Handle HTTP response and raise appropriate exceptions."""
        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = error_data.get("message") if isinstance(error_data, dict) else None
                message = message or f"HTTP {response.status_code}"
            except ValueError:
                message = response.text or f"HTTP {response.status_code}"

            if response.status_code in (401, 403):
                raise AuthenticationError(message, response.status_code)
            if response.status_code == 409:
                raise ConflictError(message, response.status_code)
            raise RemoteError(message, response.status_code)

        try:
            body = response.json() if response.content else {}
        except ValueError as e:
            raise NetworkError(f"Failed to parse response: {e}") from e

        if isinstance(body, dict) and body.get("status") == "ERROR":
            raise RemoteError(body.get("message", "Dataverse reported an error"), response.status_code)
        return body

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        content: Union[str, bytes, None] = None,
    ) -> Dict[str, Any]:
        """Perform exactly one round-trip and return the decoded response envelope.

        Raises:
            NetworkError: The request could not be completed
            RemoteError: Dataverse answered with an error status
        """
        logger.debug(f"{method} {path} params={params}")
        try:
            response = self.client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                headers=headers,
                json=json,
                content=content,
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Network error during {method} {path}: {e}") from e
        return self._handle_response(response)

    def dataset(self, id_or_pid: Union[int, str], sleep: Callable[[float], None] = None) -> DatasetApi:
        """Return the API for one dataset, addressed by database id or persistent id."""
        if isinstance(id_or_pid, str) and not id_or_pid:
            raise ValidationError("Dataset id must not be empty")
        return DatasetApi(self, id_or_pid, sleep=sleep)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
