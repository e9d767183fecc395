"""Cache service for core business logic.

This service owns the tiering policy: which tier a captured result is
written to, and in which order tiers are probed on lookup. It also
computes the introspection figures for the status report.
"""

import logging
from dataclasses import dataclass

from tts_cache.config import settings
from tts_cache.entities import CacheEntryEntity, Expiration
from tts_cache.models import CacheMetrics
from tts_cache.protocols import CacheStore
from tts_cache.services.persistence_service import PersistenceService

logger = logging.getLogger(__name__)

DURABLE = "durable"
TEMPORARY = "temporary"


@dataclass(frozen=True)
class CacheHit:
    """A lookup result and the tier that produced it."""

    entry: CacheEntryEntity
    tier: str


class CacheService:
    """Two-tier cache orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: the durable and temporary tiers

    Durable entries never expire and are snapshotted to disk after every
    durable commit. Temporary entries expire after a short fixed window
    and are never persisted. The two tiers are separate namespaces;
    lookups probe durable first.

    Example:
        ```python
        from tts_cache.services import CacheService

        cache = CacheService.create(
            durable=MemoryCacheRepository.create(DURABLE),
            temporary=MemoryCacheRepository.create(TEMPORARY, ttl=300),
        )
        cache.commit(key, entry, retain_durably=True)
        hit = cache.lookup(key)
        ```
    """

    def __init__(
        self,
        durable: CacheStore,
        temporary: CacheStore,
        persistence: PersistenceService | None = None,
        temporary_ttl: float | None = None,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            durable: Store for entries the caller asked to keep.
            temporary: Store for short-lived entries.
            persistence: Snapshot writer for the durable tier. None disables persistence.
            temporary_ttl: Lifetime of temporary entries in seconds. Defaults to settings.
            metrics: Counter sink. A fresh one is created if omitted.
        """
        self._durable = durable
        self._temporary = temporary
        self._persistence = persistence
        self._temporary_ttl = temporary_ttl or settings.temp_cache_ttl
        self._metrics = metrics or CacheMetrics()

    @classmethod
    def create(
        cls,
        durable: CacheStore,
        temporary: CacheStore,
        persistence: PersistenceService | None = None,
        temporary_ttl: float | None = None,
    ) -> "CacheService":
        """Factory method to create CacheService with sensible defaults.

        Args:
            durable: Durable tier store (required).
            temporary: Temporary tier store (required).
            persistence: Snapshot writer. If None, durable commits are not saved.
            temporary_ttl: Temporary entry lifetime. If None, uses settings.

        Returns:
            Configured CacheService instance
        """
        return cls(
            durable=durable,
            temporary=temporary,
            persistence=persistence,
            temporary_ttl=temporary_ttl,
        )

    def lookup(self, key: str) -> CacheHit | None:
        """Find an entry, probing the durable tier before the temporary one.

        Args:
            key: The cache key

        Returns:
            CacheHit if either tier holds a live entry, None otherwise
        """
        entry = self._durable.get(key)
        if entry is not None:
            self._metrics.record_hit(DURABLE)
            return CacheHit(entry=entry, tier=DURABLE)

        entry = self._temporary.get(key)
        if entry is not None:
            self._metrics.record_hit(TEMPORARY)
            return CacheHit(entry=entry, tier=TEMPORARY)

        self._metrics.record_miss()
        return None

    def commit(self, key: str, entry: CacheEntryEntity, retain_durably: bool) -> None:
        """Store a freshly produced result in the tier the request asked for.

        A durable commit schedules a background snapshot save and returns
        immediately.

        Args:
            key: The cache key
            entry: The captured result
            retain_durably: True for the durable tier, False for the temporary one
        """
        if retain_durably:
            self._durable.set(key, entry, Expiration.never())
            self._metrics.record_commit(durable=True)
            if self._persistence is not None:
                self._persistence.schedule_save()
        else:
            self._temporary.set(key, entry, Expiration.after(self._temporary_ttl))
            self._metrics.record_commit(durable=False)

        logger.debug(
            "Cached %d bytes (%s) in %s tier",
            entry.size,
            entry.content_type,
            DURABLE if retain_durably else TEMPORARY,
        )

    def status(self) -> dict[str, int]:
        """Compute entry count and occupied bytes of the durable tier.

        The byte total is the sum of payload and UTF-8 key lengths over
        the durable tier only. It is a point-in-time scan, not a
        consistent view under concurrent writers.

        Returns:
            Dictionary with items_count, cache_memory_bytes and temporary_items_count
        """
        occupied = 0
        for key, entry in self._durable.items():
            occupied += entry.size
            occupied += len(key.encode("utf-8"))

        return {
            "items_count": self._durable.item_count(),
            "cache_memory_bytes": occupied,
            "temporary_items_count": self._temporary.item_count(),
        }

    def clear_temporary(self) -> int:
        """Drop every temporary entry.

        Returns:
            Number of entries deleted
        """
        return self._temporary.clear()

    @property
    def durable(self) -> CacheStore:
        """Get the durable tier (for testing)."""
        return self._durable

    @property
    def temporary(self) -> CacheStore:
        """Get the temporary tier (for testing)."""
        return self._temporary

    @property
    def persistence_enabled(self) -> bool:
        return self._persistence is not None

    @property
    def metrics(self) -> CacheMetrics:
        return self._metrics
