"""Built-in default collection used to initialize empty stores."""
from __future__ import annotations

from .sites import ANIME, MOVIES, SPORTS, STREAMING, TV_SHOWS, Site

INITIAL_SITES: tuple[Site, ...] = (
    Site(
        id="1",
        name="Netflix",
        url="https://www.netflix.com",
        description="Movies, series and documentaries on demand.",
        category=STREAMING,
    ),
    Site(
        id="2",
        name="MUBI",
        url="https://mubi.com",
        description="Hand-picked arthouse and classic films.",
        category=MOVIES,
    ),
    Site(
        id="3",
        name="Tubi",
        url="https://tubitv.com",
        description="Free ad-supported movies.",
        category=MOVIES,
    ),
    Site(
        id="4",
        name="Crunchyroll",
        url="https://www.crunchyroll.com",
        description="Simulcast anime and manga.",
        category=ANIME,
    ),
    Site(
        id="5",
        name="PBS Video",
        url="https://www.pbs.org/video",
        description="Full episodes of PBS series.",
        category=TV_SHOWS,
    ),
    Site(
        id="6",
        name="DAZN",
        url="https://www.dazn.com",
        description="Live and on-demand sports events.",
        category=SPORTS,
    ),
)
