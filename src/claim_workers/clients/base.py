"""Shared HTTP plumbing for the remote insurance services.

Clients are thin: they map HTTP 404 to ``None`` and every other failure
to :class:`RemoteServiceError`. Turning those errors into results is the
job of the services layer.
"""

from typing import Any, ClassVar, TypeVar

import httpx
from beartype import beartype
from pydantic import BaseModel, ValidationError

from ..core.logging_utils import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class RemoteServiceError(Exception):
    """A remote service call failed (transport error or non-404 HTTP error)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """Base class for JSON REST clients sharing one ``httpx.AsyncClient``."""

    service_name: ClassVar[str] = "remote service"

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        """Wrap an HTTP client whose ``base_url`` points at the service."""
        self._http = http_client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 10.0) -> "ApiClient":
        """Create a client with its own connection pool."""
        return cls(
            httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout,
                headers={"Accept": "application/json"},
            )
        )

    @beartype
    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any | None:
        """Send a request and return the decoded JSON body, ``None`` on 404."""
        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.TimeoutException as exc:
            raise RemoteServiceError(
                f"{self.service_name} request timed out: {method} {path}"
            ) from exc
        except httpx.RequestError as exc:
            raise RemoteServiceError(
                f"Network error calling {self.service_name}: {exc}"
            ) from exc

        if response.status_code == 404:
            logger.debug("%s returned 404 for %s %s", self.service_name, method, path)
            return None
        if response.is_error:
            raise RemoteServiceError(
                f"{self.service_name} returned HTTP {response.status_code} "
                f"for {method} {path}",
                status_code=response.status_code,
            )
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteServiceError(
                f"{self.service_name} returned invalid JSON for {method} {path}"
            ) from exc

    def _parse(self, model: type[M], data: Any) -> M | None:
        """Validate a response body as ``model``; an empty body gives ``None``."""
        if not data:
            return None
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RemoteServiceError(
                f"{self.service_name} returned a malformed {model.__name__}: "
                f"{exc.error_count()} validation errors"
            ) from exc

    def _parse_list(self, model: type[M], data: Any) -> list[M]:
        """Validate a JSON array body item by item."""
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteServiceError(
                f"{self.service_name} returned {type(data).__name__}, expected a list"
            )
        items = []
        for entry in data:
            item = self._parse(model, entry)
            if item is not None:
                items.append(item)
        return items
