"""In-memory implementation of CacheStore.

A thread-safe dict of records with per-entry expiration and an optional
background janitor that purges expired records, in the manner of
go-cache. The service runs two instances: the durable tier (entries never
expire, no janitor) and the temporary tier (short default TTL, periodic
sweep).
"""

import logging
import threading
import time
from collections.abc import Callable

from tts_cache.entities import CacheEntryEntity, CacheRecord, Expiration

logger = logging.getLogger(__name__)


class MemoryCacheRepository:
    """In-memory implementation of the CacheStore protocol.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Expired records are never returned by ``get``/``items``; they stay in
    memory until ``delete_expired`` runs, either from the janitor thread
    or when called directly.
    """

    def __init__(
        self,
        name: str = "cache",
        default_expiration: Expiration | None = None,
        sweep_interval: float | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the memory cache repository.

        Args:
            name: Tier name used in log messages.
            default_expiration: Applied when ``set`` gets no expiration. Defaults to never.
            sweep_interval: Seconds between janitor sweeps. None disables the janitor.
            clock: Returns the current Unix time. Defaults to time.time.
        """
        self._name = name
        self._default_expiration = default_expiration or Expiration.never()
        self._sweep_interval = sweep_interval
        self._clock = clock or time.time
        self._records: dict[str, CacheRecord] = {}
        self._lock = threading.RLock()
        self._stop_janitor = threading.Event()
        self._janitor: threading.Thread | None = None

    @classmethod
    def create(
        cls,
        name: str = "cache",
        ttl: float | None = None,
        sweep_interval: float | None = None,
    ) -> "MemoryCacheRepository":
        """Factory method to create a tier with a default TTL.

        Args:
            name: Tier name used in log messages.
            ttl: Default time-to-live in seconds. None means entries never expire.
            sweep_interval: Seconds between janitor sweeps. None disables the janitor.

        Returns:
            Configured MemoryCacheRepository

        Example:
            ```python
            durable = MemoryCacheRepository.create("durable")
            temporary = MemoryCacheRepository.create("temporary", ttl=300, sweep_interval=600)
            ```
        """
        expiration = Expiration.after(ttl) if ttl is not None else Expiration.never()
        return cls(name=name, default_expiration=expiration, sweep_interval=sweep_interval)

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the live entry stored under key.

        Args:
            key: The cache key

        Returns:
            The entry, or None if missing or expired
        """
        with self._lock:
            record = self._records.get(key)
        if record is None or record.is_expired(self._clock()):
            return None
        return record.entry

    def set(
        self,
        key: str,
        entry: CacheEntryEntity,
        expiration: Expiration | None = None,
    ) -> None:
        """Insert or overwrite an entry.

        Args:
            key: The cache key
            entry: The entry to store
            expiration: Expiration policy; None uses the store default
        """
        now = self._clock()
        policy = expiration or self._default_expiration
        record = CacheRecord(entry=entry, expires_at=policy.deadline(now), stored_at=now)
        with self._lock:
            self._records[key] = record

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Args:
            key: The cache key

        Returns:
            True if deleted, False otherwise
        """
        with self._lock:
            return self._records.pop(key, None) is not None

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries deleted
        """
        with self._lock:
            count = len(self._records)
            self._records.clear()
        return count

    def item_count(self) -> int:
        """Count live (non-expired) entries."""
        now = self._clock()
        with self._lock:
            return sum(1 for record in self._records.values() if not record.is_expired(now))

    def items(self) -> list[tuple[str, CacheEntryEntity]]:
        """Point-in-time copy of all live (key, entry) pairs."""
        return [(key, record.entry) for key, record in self.records().items()]

    def records(self) -> dict[str, CacheRecord]:
        """Point-in-time copy of all live records, with expiration metadata."""
        now = self._clock()
        with self._lock:
            return {
                key: record
                for key, record in self._records.items()
                if not record.is_expired(now)
            }

    def delete_expired(self) -> int:
        """Purge expired records.

        Returns:
            Number of records removed
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, record in self._records.items() if record.is_expired(now)]
            for key in expired:
                del self._records[key]
        if expired:
            logger.debug("Purged %d expired entries from %s tier", len(expired), self._name)
        return len(expired)

    def start_janitor(self) -> None:
        """Start the background sweep thread (no-op without a sweep interval)."""
        if self._sweep_interval is None or self._janitor is not None:
            return

        self._stop_janitor.clear()
        self._janitor = threading.Thread(
            target=self._run_janitor,
            args=(self._sweep_interval,),
            name=f"{self._name}-janitor",
            daemon=True,
        )
        self._janitor.start()

    def _run_janitor(self, interval: float) -> None:
        while not self._stop_janitor.wait(interval):
            self.delete_expired()

    def close(self) -> None:
        """Stop the janitor thread."""
        if self._janitor is None:
            return
        self._stop_janitor.set()
        self._janitor.join()
        self._janitor = None

    @property
    def name(self) -> str:
        """Get the tier name."""
        return self._name

    @property
    def default_expiration(self) -> Expiration:
        """Get the expiration applied when none is given."""
        return self._default_expiration
