"""
Key-value persistence adapter.

The whole site collection is stored as one JSON value under one key. Two
clients are provided: the hosted KV REST API (Upstash protocol, used by
Vercel KV) over httpx, and a durable ``kv_entries`` table over SQLAlchemy.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence
from urllib.parse import quote

import httpx
from sqlalchemy.exc import SQLAlchemyError

from streamverse.core.config import DEFAULT_SITES_KEY, Settings, get_settings
from streamverse.db.models import KVEntry
from streamverse.db.session import get_session
from streamverse.domain.seed import INITIAL_SITES
from streamverse.domain.sites import Site, SiteDraft, new_site_id

from .base import (
    StorageUnavailableError,
    remove_site,
    replace_site,
    sites_from_json,
    sites_to_json,
)

logger = logging.getLogger(__name__)


class KVClient(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class RestKVClient:
    """Minimal client for the KV REST API (``/get/<key>``, ``/set/<key>``)."""

    def __init__(
        self,
        url: str,
        token: str,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url or not token:
            raise StorageUnavailableError("KV_REST_API_URL and KV_REST_API_TOKEN are required")
        self.url = url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    def _call(self, method: str, path: str, **kwargs) -> object:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageUnavailableError(f"KV request {method} {path} failed: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400 or (isinstance(body, dict) and body.get("error")):
            detail = body.get("error") if isinstance(body, dict) else None
            raise StorageUnavailableError(
                f"KV request {method} {path} returned {response.status_code}: {detail or response.text[:200]}"
            )
        return body.get("result") if isinstance(body, dict) else None

    def get(self, key: str) -> Optional[str]:
        result = self._call("GET", f"/get/{quote(key, safe='')}")
        return None if result is None else str(result)

    def set(self, key: str, value: str) -> None:
        self._call("POST", f"/set/{quote(key, safe='')}", content=value.encode("utf-8"))

    def close(self) -> None:
        self._client.close()


class SQLKVClient:
    """Key-value pairs in the ``kv_entries`` table."""

    def get(self, key: str) -> Optional[str]:
        try:
            with get_session() as session:
                entry = session.get(KVEntry, key)
                return entry.value if entry else None
        except (SQLAlchemyError, RuntimeError) as exc:
            raise StorageUnavailableError(f"SQL read of '{key}' failed: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with get_session() as session:
                entry = session.get(KVEntry, key)
                if not entry:
                    session.add(KVEntry(key=key, value=value, updated_at=now))
                else:
                    entry.value = value
                    entry.updated_at = now
                session.commit()
        except (SQLAlchemyError, RuntimeError) as exc:
            raise StorageUnavailableError(f"SQL write of '{key}' failed: {exc}") from exc


def build_kv_client(settings: Settings | None = None) -> Optional[KVClient]:
    """REST client when both KV vars are set, SQL when DATABASE_URL is, else None."""
    settings = settings or get_settings()
    if settings.kv_rest_configured:
        return RestKVClient(
            settings.kv_rest_api_url,
            settings.kv_rest_api_token,
            timeout=settings.http_timeout_seconds,
        )
    if settings.database_url:
        return SQLKVClient()
    logger.info("KV storage is not available - missing KV_REST_API_* and DATABASE_URL")
    return None


class KVSiteStorage:
    """Site backend holding the whole collection under one key."""

    name = "kv"

    def __init__(
        self,
        client: Optional[KVClient],
        key: str = DEFAULT_SITES_KEY,
        *,
        seed: Sequence[Site] = INITIAL_SITES,
    ) -> None:
        self.client = client
        self.key = key
        self.seed = tuple(seed)

    @property
    def available(self) -> bool:
        return self.client is not None

    def _require_client(self) -> KVClient:
        if self.client is None:
            raise StorageUnavailableError("KV storage is not available")
        return self.client

    def _read(self) -> Optional[list[Site]]:
        raw = self._require_client().get(self.key)
        try:
            return sites_from_json(raw)
        except ValueError as exc:
            logger.error("Corrupt value under KV key %s: %s", self.key, exc)
            raise StorageUnavailableError(f"value under '{self.key}' is not a site list") from exc

    def _write(self, sites: list[Site]) -> None:
        self._require_client().set(self.key, sites_to_json(sites))

    def initialize(self) -> list[Site]:
        """Seed the key when it is absent or empty; idempotent."""
        sites = self._read()
        if sites:
            return sites
        seeded = list(self.seed)
        self._write(seeded)
        logger.info("Seeded KV key %s with %d sites", self.key, len(seeded))
        return seeded

    def _load(self) -> list[Site]:
        sites = self._read()
        if sites is None:
            return self.initialize()
        return sites

    # -------------------------- contract --------------------------
    def list_all(self) -> list[Site]:
        try:
            return self._load()
        except StorageUnavailableError as exc:
            logger.error("Error getting sites from KV key %s: %s", self.key, exc)
            raise

    def add(self, draft: SiteDraft) -> Site:
        try:
            sites = self._load()
            site = draft.with_id(new_site_id())
            sites.append(site)
            self._write(sites)
        except StorageUnavailableError as exc:
            logger.error("Error adding site to KV: %s", exc)
            raise
        return site

    def update(self, site_id: str, draft: SiteDraft) -> Optional[Site]:
        try:
            sites = self._load()
            updated = replace_site(sites, site_id, draft)
            if updated is None:
                return None
            self._write(sites)
        except StorageUnavailableError as exc:
            logger.error("Error updating site %s in KV: %s", site_id, exc)
            raise
        return updated

    def delete(self, site_id: str) -> bool:
        try:
            remaining = remove_site(self._load(), site_id)
            if remaining is None:
                return False
            self._write(remaining)
        except StorageUnavailableError as exc:
            logger.error("Error deleting site %s from KV: %s", site_id, exc)
            raise
        return True
