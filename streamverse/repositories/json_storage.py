"""
Flat-file JSON persistence adapter.

The whole collection lives in one pretty-printed JSON document. There is no
locking: a single writer at a time is assumed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from streamverse.domain.seed import INITIAL_SITES
from streamverse.domain.sites import Site, SiteDraft, new_site_id

from .base import StorageWriteError, remove_site, replace_site, sites_from_json

logger = logging.getLogger(__name__)

DATA_FILE = Path.cwd() / "data" / "sites.json"


class JSONFileSiteStorage:
    """Site backend persisted to a single JSON file.

    ``save()`` never raises and reports failure as False. ``add``, ``update``
    and ``delete`` do raise ``StorageWriteError`` when that save fails, so a
    write that did not reach disk is never reported as a success.
    """

    name = "file"

    def __init__(self, path: str | Path | None = None, *, seed: Sequence[Site] = INITIAL_SITES) -> None:
        self.path = Path(path) if path else DATA_FILE
        self.seed = tuple(seed)
        self._initialized = False

    def initialize(self) -> bool:
        """Create the data directory and seed the file if it is missing.

        Runs once per instance; returns False (and retries next time) when the
        directory or the seed file could not be written.
        """
        if self._initialized:
            return True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create data directory %s: %s", self.path.parent, exc)
            return False
        if not self.path.exists():
            logger.info("Seeding %s with the default sites", self.path)
            if not self.save(list(self.seed)):
                return False
        self._initialized = True
        return True

    def load(self) -> list[Site]:
        self.initialize()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                sites = sites_from_json(f.read())
        except (OSError, ValueError) as exc:
            logger.error("Error reading sites from %s: %s", self.path, exc)
            return list(self.seed)
        return sites if sites is not None else list(self.seed)

    def save(self, sites: list[Site]) -> bool:
        payload = [site.to_dict() for site in sites]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Error saving %d sites to %s: %s", len(payload), self.path, exc)
            return False
        return True

    def _persist(self, sites: list[Site], action: str) -> None:
        if not self.save(sites):
            raise StorageWriteError(f"{action} was not persisted to {self.path}")

    # -------------------------- contract --------------------------
    def list_all(self) -> list[Site]:
        return self.load()

    def add(self, draft: SiteDraft) -> Site:
        sites = self.load()
        site = draft.with_id(new_site_id())
        sites.append(site)
        self._persist(sites, "add")
        return site

    def update(self, site_id: str, draft: SiteDraft) -> Optional[Site]:
        sites = self.load()
        updated = replace_site(sites, site_id, draft)
        if updated is None:
            return None
        self._persist(sites, "update")
        return updated

    def delete(self, site_id: str) -> bool:
        remaining = remove_site(self.load(), site_id)
        if remaining is None:
            return False
        self._persist(remaining, "delete")
        return True
