"""Freshness cache in front of the vector store's namespace statistics."""

import time
from collections.abc import Callable
from functools import lru_cache
from typing import Protocol

from src.utils.logging import get_logger

from .storage_service import StorageService

logger = get_logger(__name__)


class CacheBackend(Protocol):
    """Storage for namespace -> last confirmed existence time."""

    def get(self, namespace: str) -> float | None: ...

    def set(self, namespace: str, confirmed_at: float) -> None: ...


class InMemoryCacheBackend:
    """Process-local cache backend."""

    def __init__(self) -> None:
        self._records: dict[str, float] = {}

    def get(self, namespace: str) -> float | None:
        return self._records.get(namespace)

    def set(self, namespace: str, confirmed_at: float) -> None:
        self._records[namespace] = confirmed_at

    def clear(self) -> None:
        self._records.clear()


@lru_cache(maxsize=1)
def get_default_cache_backend() -> InMemoryCacheBackend:
    """Return the process-wide in-memory cache backend."""
    return InMemoryCacheBackend()


class NamespaceCache:
    """Answers "is this namespace already indexed?".

    A record younger than the TTL answers without contacting the store.
    Otherwise the store's namespace statistics decide, and a positive answer
    refreshes the record. Store failures count as "not indexed".
    """

    def __init__(
        self,
        storage_service: StorageService,
        ttl_seconds: float,
        backend: CacheBackend | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.storage_service = storage_service
        self.ttl_seconds = ttl_seconds
        self.backend = backend or get_default_cache_backend()
        self.clock = clock

    def is_fresh(self, namespace: str) -> bool:
        confirmed_at = self.backend.get(namespace)
        return confirmed_at is not None and self.clock() - confirmed_at < self.ttl_seconds

    def mark_fresh(self, namespace: str) -> None:
        self.backend.set(namespace, self.clock())

    async def exists(self, namespace: str) -> bool:
        """Check whether a namespace holds indexed chunks.

        Args:
            namespace: Namespace to check.

        Returns:
            True if the namespace is cached or has at least one stored entry.
        """
        if self.is_fresh(namespace):
            logger.debug("namespace_cache_hit", namespace=namespace)
            return True

        try:
            count = await self.storage_service.count_namespace_entries(namespace)
        except Exception as e:
            logger.exception(
                "namespace_check_failed",
                namespace=namespace,
                error_type=type(e).__name__,
            )
            return False

        if count > 0:
            self.mark_fresh(namespace)
            logger.info("namespace_confirmed", namespace=namespace, count=count)
            return True

        logger.info("namespace_missing", namespace=namespace)
        return False
