"""Create the key-value table and seed the sites key.

Usage: python -m streamverse.db.create_tables
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from streamverse.core.config import get_settings
from streamverse.repositories.base import StorageError

from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all() -> None:
    Base.metadata.create_all(bind=get_engine())


def seed_sites() -> int:
    from streamverse.repositories.kv_storage import KVSiteStorage, SQLKVClient

    storage = KVSiteStorage(SQLKVClient(), key=get_settings().sites_key)
    return len(storage.initialize())


if __name__ == "__main__":
    try:
        create_all()
        count = seed_sites()
        print(f"kv_entries ready; {count} sites under '{get_settings().sites_key}'.")
    except (SQLAlchemyError, StorageError) as exc:
        raise SystemExit(f"Failed to prepare the key-value store: {exc}") from exc
