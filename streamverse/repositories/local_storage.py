"""
Client-local persistence adapter.

``SlotStore`` mirrors the browser ``localStorage`` API: named string slots
scoped to one client, kept in a small JSON file on that client's machine.
``LocalSiteStorage`` keeps the collection in one slot and never fails the
caller; it is the last-resort fallback.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence

from streamverse.core.config import DEFAULT_LOCAL_SLOT
from streamverse.domain.seed import INITIAL_SITES
from streamverse.domain.sites import Site, SiteDraft, new_site_id

from .base import remove_site, replace_site, sites_from_json, sites_to_json

logger = logging.getLogger(__name__)


class Slots(Protocol):
    def get_item(self, name: str) -> Optional[str]: ...

    def set_item(self, name: str, value: str) -> None: ...

    def remove_item(self, name: str) -> None: ...


class MemorySlotStore:
    """In-process slots; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, name: str) -> Optional[str]:
        return self._items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self._items[name] = value

    def remove_item(self, name: str) -> None:
        self._items.pop(name, None)


class SlotStore:
    """Slots persisted as one JSON object in a per-client file.

    Read and write errors propagate as ``OSError``/``ValueError``; the site
    backend decides how to degrade.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a slot mapping")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")

    def get_item(self, name: str) -> Optional[str]:
        return self._read_all().get(name)

    def set_item(self, name: str, value: str) -> None:
        try:
            items = self._read_all()
        except ValueError:
            logger.warning("Replacing unreadable slot file %s", self.path)
            items = {}
        items[name] = value
        self._write_all(items)

    def remove_item(self, name: str) -> None:
        items = self._read_all()
        if items.pop(name, None) is not None:
            self._write_all(items)


class LocalSiteStorage:
    """Site backend kept in one client-local slot."""

    name = "local"

    def __init__(
        self,
        slots: Slots | None = None,
        slot: str = DEFAULT_LOCAL_SLOT,
        *,
        seed: Sequence[Site] = INITIAL_SITES,
    ) -> None:
        self.slots = slots if slots is not None else MemorySlotStore()
        self.slot = slot
        self.seed = tuple(seed)

    def initialize(self) -> list[Site]:
        """Write the seed into the slot when the slot is empty."""
        try:
            if self.slots.get_item(self.slot) is None:
                self._save(list(self.seed))
        except (OSError, ValueError) as exc:
            logger.error("Error reading local slot %s: %s", self.slot, exc)
        return self._load()

    def _load(self) -> list[Site]:
        try:
            sites = sites_from_json(self.slots.get_item(self.slot))
        except (OSError, ValueError) as exc:
            logger.error("Error reading local slot %s: %s", self.slot, exc)
            return list(self.seed)
        return sites if sites is not None else list(self.seed)

    def _save(self, sites: list[Site]) -> None:
        try:
            self.slots.set_item(self.slot, sites_to_json(sites))
        except OSError as exc:
            logger.error("Error saving %d sites to local slot %s: %s", len(sites), self.slot, exc)

    def reset(self) -> None:
        """Drop the slot; the next read falls back to the seed."""
        try:
            self.slots.remove_item(self.slot)
        except (OSError, ValueError) as exc:
            logger.error("Error clearing local slot %s: %s", self.slot, exc)

    # -------------------------- contract --------------------------
    def list_all(self) -> list[Site]:
        return self._load()

    def add(self, draft: SiteDraft) -> Site:
        sites = self._load()
        site = draft.with_id(new_site_id())
        sites.append(site)
        self._save(sites)
        return site

    def update(self, site_id: str, draft: SiteDraft) -> Optional[Site]:
        sites = self._load()
        updated = replace_site(sites, site_id, draft)
        if updated is None:
            return None
        self._save(sites)
        return updated

    def delete(self, site_id: str) -> bool:
        remaining = remove_site(self._load(), site_id)
        if remaining is None:
            return False
        self._save(remaining)
        return True
