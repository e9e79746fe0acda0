"""HTTP client for the e-commerce admin REST API."""

from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping, Optional, Sequence

import httpx

from adminconsole.application.presets import ResourceDefinition
from adminconsole.application.services.page_payload import items_from_payload, stats_from_payload
from adminconsole.config import DEFAULT_API_URL, HTTP_TIMEOUT_SEC
from adminconsole.domain.models import FilterSet, is_unset
from adminconsole.errors import PayloadError, TransportError

LOGGER = logging.getLogger(__name__)


class AdminApiClient:
    """Thin JSON client with bearer-token auth.

    Every failure, whether the connection broke or the server answered
    with an error status, is raised as :class:`TransportError` carrying the
    server's ``message`` when it sent one.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        token: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT_SEC,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must include scheme and host")
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, Mapping) and body.get("message"):
            return str(body["message"])
        if response.status_code == 401:
            return "Session expired. Please login again."
        return f"HTTP {response.status_code} {response.reason_phrase}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._client.request(method, url, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc
        if response.is_error:
            message = self._error_message(response)
            LOGGER.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            raise TransportError(message, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise PayloadError(f"{method} {path} returned invalid JSON") from exc

    def resource(self, definition: ResourceDefinition) -> "ResourceEndpoint":
        return ResourceEndpoint(self, definition)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AdminApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ResourceEndpoint:
    """One list resource of the API, shaped as a ``ResourceGateway``."""

    def __init__(self, client: AdminApiClient, definition: ResourceDefinition) -> None:
        self._client = client
        self._definition = definition

    @property
    def definition(self) -> ResourceDefinition:
        return self._definition

    def _query(self, filters: FilterSet, page_number: int, page_size: int) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page_number, "limit": page_size}
        for key, value in filters.items():
            if is_unset(value):
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[self._definition.param_aliases.get(key, key)] = value
        return params

    def fetch_page(self, filters: FilterSet, page_number: int, page_size: int) -> Any:
        return self._client.request(
            "GET", self._definition.endpoint, params=self._query(filters, page_number, page_size)
        )

    def export_rows(self, filters: FilterSet, page_size: int) -> Sequence[Mapping[str, Any]]:
        payload = self._client.request(
            "GET", self._definition.endpoint, params=self._query(filters, 1, page_size)
        )
        return items_from_payload(payload, items_keys=self._definition.items_keys)

    def fetch_stats(self) -> dict[str, Any]:
        if not self._definition.has_stats:
            raise TransportError(f"{self._definition.name} has no stats endpoint")
        payload = self._client.request("GET", self._definition.endpoint + self._definition.stats_path)
        return stats_from_payload(payload, keys=self._definition.stats_keys)

    def mutate(
        self,
        resource_id: Hashable,
        payload: Mapping[str, Any],
        *,
        method: str = "PUT",
        suffix: str = "",
    ) -> Any:
        path = f"{self._definition.endpoint}/{resource_id}{suffix}"
        return self._client.request(method, path, json=dict(payload))

    def delete(self, resource_id: Hashable) -> Any:
        return self._client.request("DELETE", f"{self._definition.endpoint}/{resource_id}")


__all__ = ["AdminApiClient", "ResourceEndpoint"]
