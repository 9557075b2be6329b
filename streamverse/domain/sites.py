"""Domain types and helpers for directory entries (sites)."""
from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

URL_PATTERN = re.compile(r"^https?://.+")

MOVIES = "Movies"
TV_SHOWS = "TV Shows"
ANIME = "Anime"
SPORTS = "Sports"
STREAMING = "Streaming"
NEWS = "News"
OTHER = "Other"

CATEGORIES = (MOVIES, TV_SHOWS, ANIME, SPORTS, STREAMING, NEWS, OTHER)


@dataclass(frozen=True)
class SiteDraft:
    """A site as submitted by a client: every field except ``id``."""

    name: str
    url: str
    description: str
    category: str
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SiteDraft":
        image = data.get("imageUrl")
        if image is None:
            image = data.get("image_url")
        return cls(
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            image_url=(str(image).strip() or None) if image else None,
        )

    def to_dict(self) -> dict:
        payload = {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "category": self.category,
        }
        if self.image_url:
            payload["imageUrl"] = self.image_url
        return payload

    def with_id(self, site_id: str) -> "Site":
        return Site(
            id=site_id,
            name=self.name,
            url=self.url,
            description=self.description,
            category=self.category,
            image_url=self.image_url,
        )


@dataclass(frozen=True)
class Site:
    """A persisted directory entry."""

    id: str
    name: str
    url: str
    description: str
    category: str
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Site":
        draft = SiteDraft.from_dict(data)
        return draft.with_id(str(data.get("id") or ""))

    def to_dict(self) -> dict:
        payload = {"id": self.id}
        payload.update(self.draft().to_dict())
        return payload

    def draft(self) -> SiteDraft:
        return SiteDraft(
            name=self.name,
            url=self.url,
            description=self.description,
            category=self.category,
            image_url=self.image_url,
        )


def validate_draft(data: Mapping[str, Any]) -> dict[str, str]:
    """Return a field -> message map; empty when the payload is acceptable."""
    errors: dict[str, str] = {}
    name = str(data.get("name") or "").strip()
    url = str(data.get("url") or "").strip()
    description = str(data.get("description") or "").strip()
    category = str(data.get("category") or "").strip()
    if not name:
        errors["name"] = "Name is required"
    if not url:
        errors["url"] = "URL is required"
    elif not URL_PATTERN.match(url):
        errors["url"] = "URL must start with http:// or https://"
    if not description:
        errors["description"] = "Description is required"
    if not category:
        errors["category"] = "Category is required"
    return errors


class _IdGenerator:
    """Millisecond timestamps, bumped when the clock has not moved forward."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self, now: float | None = None) -> str:
        millis = int((time.time() if now is None else now) * 1000)
        with self._lock:
            if millis <= self._last:
                millis = self._last + 1
            self._last = millis
        return str(millis)


_ids = _IdGenerator()


def new_site_id(now: float | None = None) -> str:
    return _ids.next(now)


@dataclass(frozen=True)
class CategoryTheme:
    accent: str
    background: str
    label: str = field(default="")


_THEMES = {
    MOVIES: CategoryTheme(accent="#ED4592", background="rgba(237,69,146,.12)", label="movies"),
    TV_SHOWS: CategoryTheme(accent="#A855F7", background="rgba(168,85,247,.12)", label="tv-shows"),
    ANIME: CategoryTheme(accent="#3B82F6", background="rgba(59,130,246,.12)", label="anime"),
    SPORTS: CategoryTheme(accent="#22C55E", background="rgba(34,197,94,.12)", label="sports"),
    NEWS: CategoryTheme(accent="#F59E0B", background="rgba(245,158,11,.12)", label="news"),
}
DEFAULT_THEME = CategoryTheme(accent="#6B7280", background="rgba(107,114,128,.12)", label="default")


def category_theme(category: str | None) -> CategoryTheme:
    """Colors for a category; anything unrecognized gets the gray default."""
    return _THEMES.get((category or "").strip(), DEFAULT_THEME)


def category_anchor(category: str | None) -> str:
    return re.sub(r"\s+", "-", (category or "").strip().lower())
