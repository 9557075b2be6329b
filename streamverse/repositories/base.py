"""Storage contract shared by every site backend."""
from __future__ import annotations

import json
from typing import Iterable, Optional, Protocol, runtime_checkable

from streamverse.domain.sites import Site, SiteDraft


class StorageError(Exception):
    """Base exception for storage backends."""


class StorageUnavailableError(StorageError):
    """Raised when the backing medium cannot be reached or is not configured."""


class StorageWriteError(StorageUnavailableError):
    """Raised when a full-collection write was not persisted."""


@runtime_checkable
class SiteStorage(Protocol):
    """CRUD over the whole site collection.

    ``update`` returns ``None`` and ``delete`` returns ``False`` when the id is
    unknown; neither raises for a missing id.
    """

    def list_all(self) -> list[Site]: ...

    def add(self, draft: SiteDraft) -> Site: ...

    def update(self, site_id: str, draft: SiteDraft) -> Optional[Site]: ...

    def delete(self, site_id: str) -> bool: ...


def sites_from_json(raw: str | bytes | None) -> Optional[list[Site]]:
    """Decode a stored collection; ``None`` when nothing is stored.

    Raises ``ValueError`` when the payload is not a JSON array of objects.
    """
    if raw is None:
        return None
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored sites payload is not a list")
    return [Site.from_dict(item) for item in data if isinstance(item, dict)]


def sites_to_json(sites: Iterable[Site], *, indent: int | None = None) -> str:
    return json.dumps([site.to_dict() for site in sites], ensure_ascii=False, indent=indent)


def replace_site(sites: list[Site], site_id: str, draft: SiteDraft) -> Optional[Site]:
    """Swap the entry with ``site_id`` in place; ``None`` when absent."""
    for index, site in enumerate(sites):
        if site.id == site_id:
            updated = draft.with_id(site_id)
            sites[index] = updated
            return updated
    return None


def remove_site(sites: list[Site], site_id: str) -> Optional[list[Site]]:
    """Return the collection without ``site_id``; ``None`` when nothing matched."""
    remaining = [site for site in sites if site.id != site_id]
    if len(remaining) == len(sites):
        return None
    return remaining
