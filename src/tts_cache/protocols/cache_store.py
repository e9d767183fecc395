"""Cache storage protocol.

Defines the interface for a key → audio entry container with per-entry
expiration. Both cache tiers (durable and temporary) are instances of
the same implementation, configured with different default expirations.
"""

from typing import Protocol, runtime_checkable

from tts_cache.entities import CacheEntryEntity, CacheRecord, Expiration


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Similar to Go's interface pattern - any type that implements these
    methods satisfies the protocol, no explicit inheritance needed.

    Implementations must be safe to call from several threads at once:
    enumeration and mutation are synchronized by the store itself.
    """

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the live entry stored under key.

        Args:
            key: The cache key

        Returns:
            The entry, or None if missing or expired
        """
        ...

    def set(
        self,
        key: str,
        entry: CacheEntryEntity,
        expiration: Expiration | None = None,
    ) -> None:
        """Insert or overwrite an entry, restarting its expiration clock.

        Args:
            key: The cache key
            entry: The entry to store
            expiration: Expiration policy; None uses the store default
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Returns:
            True if deleted, False otherwise
        """
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries deleted
        """
        ...

    def item_count(self) -> int:
        """Count live (non-expired) entries."""
        ...

    def items(self) -> list[tuple[str, CacheEntryEntity]]:
        """Point-in-time copy of all live (key, entry) pairs."""
        ...

    def records(self) -> dict[str, CacheRecord]:
        """Point-in-time copy of all live records, with expiration metadata."""
        ...
