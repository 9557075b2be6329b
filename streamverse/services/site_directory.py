"""
Client-side orchestration of site actions across backends.

Each action is tried against an ordered list of backends (remote API first,
client-local storage last). The first backend that answers wins; every
backend that fails is recorded as an ``AttemptFailure`` instead of raising.
After a successful mutation the full collection is read again so callers
display persisted state rather than patching their own copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Sequence, TypeVar

from streamverse.core.config import Settings, get_settings
from streamverse.domain.sites import Site, SiteDraft
from streamverse.repositories.base import SiteStorage, StorageError
from streamverse.repositories.factory import local_storage

from .api_client import SitesApiClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AttemptFailure:
    backend: str
    operation: str
    error: StorageError


@dataclass
class DirectoryResult(Generic[T]):
    """Outcome of one action: the value, who served it, who failed first."""

    value: T
    backend: str
    failures: list[AttemptFailure] = field(default_factory=list)
    sites: Optional[list[Site]] = None

    @property
    def fell_back(self) -> bool:
        return bool(self.failures)


class DirectoryUnavailableError(StorageError):
    """Raised when every backend failed for an action."""

    def __init__(self, operation: str, failures: Sequence[AttemptFailure]) -> None:
        self.operation = operation
        self.failures = list(failures)
        names = ", ".join(f"{f.backend}: {f.error}" for f in self.failures) or "no backends configured"
        super().__init__(f"{operation} failed on every backend ({names})")


class SiteDirectory:
    """Ordered fallback across named SiteStorage backends."""

    def __init__(self, backends: Sequence[tuple[str, SiteStorage]]) -> None:
        self.backends = list(backends)

    @classmethod
    def default(cls, settings: Settings | None = None) -> "SiteDirectory":
        settings = settings or get_settings()
        api = SitesApiClient(settings.sites_api_url, timeout=settings.http_timeout_seconds)
        return cls([("api", api), ("local", local_storage(settings))])

    def _attempt(
        self,
        operation: str,
        call: Callable[[SiteStorage], T],
        start: int = 0,
    ) -> tuple[DirectoryResult[T], int]:
        failures: list[AttemptFailure] = []
        for index, (name, backend) in enumerate(self.backends[start:], start=start):
            try:
                value = call(backend)
            except StorageError as exc:
                logger.warning("%s via %s failed, trying next backend: %s", operation, name, exc)
                failures.append(AttemptFailure(backend=name, operation=operation, error=exc))
                continue
            if failures:
                logger.info("%s served by fallback backend %s", operation, name)
            return DirectoryResult(value=value, backend=name, failures=failures), index
        raise DirectoryUnavailableError(operation, failures)

    def _mutate(self, operation: str, call: Callable[[SiteStorage], T]) -> DirectoryResult[T]:
        result, index = self._attempt(operation, call)
        # Re-read from the backend that accepted the write so a fallback write is visible
        try:
            refreshed, _ = self._attempt("list", lambda backend: backend.list_all(), start=index)
        except DirectoryUnavailableError as exc:
            logger.error("Could not refresh sites after %s: %s", operation, exc)
            result.failures.extend(exc.failures)
            return result
        result.sites = refreshed.value
        result.failures.extend(refreshed.failures)
        return result

    def list_all(self) -> DirectoryResult[list[Site]]:
        result, _ = self._attempt("list", lambda backend: backend.list_all())
        result.sites = result.value
        return result

    def add(self, draft: SiteDraft) -> DirectoryResult[Site]:
        return self._mutate("add", lambda backend: backend.add(draft))

    def update(self, site_id: str, draft: SiteDraft) -> DirectoryResult[Optional[Site]]:
        return self._mutate("update", lambda backend: backend.update(site_id, draft))

    def delete(self, site_id: str) -> DirectoryResult[bool]:
        return self._mutate("delete", lambda backend: backend.delete(site_id))
