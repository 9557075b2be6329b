"""
Persistence adapters for the site collection.

Every backend stores the whole collection as one value (a KV key, a JSON
file, a client-local slot) and satisfies the ``SiteStorage`` protocol.
Services and routers depend on the protocol and obtain a concrete backend
from ``factory.get_storage``.
"""

from .base import SiteStorage, StorageError, StorageUnavailableError, StorageWriteError
from .factory import get_storage

__all__ = [
    "SiteStorage",
    "StorageError",
    "StorageUnavailableError",
    "StorageWriteError",
    "get_storage",
]
