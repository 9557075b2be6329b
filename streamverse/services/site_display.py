"""Helpers for the directory page (search, grouping, card view models)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from streamverse.domain.sites import CategoryTheme, Site, category_anchor, category_theme


@dataclass(frozen=True)
class SiteCard:
    site: Site
    theme: CategoryTheme
    glyph: str

    @property
    def has_image(self) -> bool:
        return bool(self.site.image_url)


@dataclass(frozen=True)
class CategoryGroup:
    category: str
    anchor: str
    theme: CategoryTheme
    cards: list[SiteCard]


def fallback_glyph(site: Site) -> str:
    """First visible character of the name, shown when there is no image."""
    name = (site.name or "").strip()
    return name[0].upper() if name else "?"


def site_card(site: Site) -> SiteCard:
    return SiteCard(site=site, theme=category_theme(site.category), glyph=fallback_glyph(site))


def search_sites(sites: Iterable[Site], query: str | None) -> list[Site]:
    """Case-insensitive match on name or description; blank query keeps everything."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(sites)
    return [
        site
        for site in sites
        if needle in (site.name or "").lower() or needle in (site.description or "").lower()
    ]


def group_by_category(sites: Iterable[Site]) -> list[CategoryGroup]:
    """Groups in first-appearance order; sites keep insertion order inside a group."""
    grouped: dict[str, list[SiteCard]] = {}
    for site in sites:
        grouped.setdefault(site.category, []).append(site_card(site))
    return [
        CategoryGroup(
            category=category,
            anchor=category_anchor(category),
            theme=category_theme(category),
            cards=cards,
        )
        for category, cards in grouped.items()
    ]
