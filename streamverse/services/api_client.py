"""HTTP client for the /api/sites endpoints, usable as a SiteStorage."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from streamverse.domain.sites import Site, SiteDraft
from streamverse.repositories.base import StorageUnavailableError

logger = logging.getLogger(__name__)


class SitesApiClient:
    """Remote-API-backed site backend.

    A 404 on update/delete is a normal NotFound result; any transport error or
    other non-2xx status raises ``StorageUnavailableError``.
    """

    name = "api"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def _request(self, method: str, path: str, *, json: Any = None, not_found_ok: bool = False) -> Optional[httpx.Response]:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("Sites API %s %s failed: %s", method, path, exc)
            raise StorageUnavailableError(f"{method} {self.base_url}{path} failed: {exc}") from exc
        if not_found_ok and response.status_code == 404:
            return None
        if not response.is_success:
            detail = _error_detail(response)
            logger.warning("Sites API %s %s returned %s: %s", method, path, response.status_code, detail)
            raise StorageUnavailableError(
                f"{method} {self.base_url}{path} returned {response.status_code}: {detail}"
            )
        return response

    def list_all(self) -> list[Site]:
        response = self._request("GET", "/api/sites")
        payload = _json(response)
        if not isinstance(payload, list):
            raise StorageUnavailableError("GET /api/sites did not return a list")
        return [Site.from_dict(item) for item in payload if isinstance(item, dict)]

    def add(self, draft: SiteDraft) -> Site:
        response = self._request("POST", "/api/sites", json=draft.to_dict())
        return _site(response)

    def update(self, site_id: str, draft: SiteDraft) -> Optional[Site]:
        response = self._request("PUT", f"/api/sites/{quote(site_id, safe='')}", json=draft.to_dict(), not_found_ok=True)
        if response is None:
            return None
        return _site(response)

    def delete(self, site_id: str) -> bool:
        response = self._request("DELETE", f"/api/sites/{quote(site_id, safe='')}", not_found_ok=True)
        if response is None:
            return False
        payload = _json(response)
        return isinstance(payload, dict) and bool(payload.get("success"))

    def close(self) -> None:
        self._client.close()


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise StorageUnavailableError(f"invalid JSON from {response.request.url}") from exc


def _site(response: httpx.Response) -> Site:
    """Decode a created/updated site; a body without an object or an id is a fault."""
    payload = _json(response)
    if not isinstance(payload, dict):
        raise StorageUnavailableError(f"{response.request.method} {response.request.url} did not return a site")
    site = Site.from_dict(payload)
    if not site.id:
        raise StorageUnavailableError(f"{response.request.method} {response.request.url} returned no id")
    return site


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return str(body)[:200]
