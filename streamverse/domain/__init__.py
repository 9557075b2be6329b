"""Domain types (Site, SiteDraft, categories) and the default seed collection."""

from .sites import Site, SiteDraft, validate_draft

__all__ = ["Site", "SiteDraft", "validate_draft"]
