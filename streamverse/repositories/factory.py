"""Construction-time choice of the site backend."""
from __future__ import annotations

import logging

from streamverse.core.config import Settings, get_settings

from .base import SiteStorage
from .json_storage import JSONFileSiteStorage
from .kv_storage import KVSiteStorage, build_kv_client
from .local_storage import LocalSiteStorage, SlotStore

logger = logging.getLogger(__name__)

SERVER = "server"
CLIENT = "client"


def local_storage(settings: Settings | None = None) -> LocalSiteStorage:
    settings = settings or get_settings()
    return LocalSiteStorage(SlotStore(settings.local_storage_path), settings.local_storage_slot)


def get_storage(context: str = SERVER, settings: Settings | None = None) -> SiteStorage:
    """Pick the backend for an execution context.

    Server: the KV store when it is configured, otherwise the JSON file.
    Client: always the local slot store. ``STORAGE_BACKEND`` (kv, file, local)
    overrides the choice.
    """
    settings = settings or get_settings()
    forced = settings.storage_backend
    if forced == "local" or (context == CLIENT and not forced):
        return local_storage(settings)
    if forced == "file":
        return JSONFileSiteStorage(settings.sites_data_file)
    client = build_kv_client(settings)
    if forced == "kv" or client is not None:
        # A forced but unconfigured KV store surfaces StorageUnavailableError per call
        return KVSiteStorage(client, settings.sites_key)
    logger.info("Using JSON file storage at %s", settings.sites_data_file)
    return JSONFileSiteStorage(settings.sites_data_file)
