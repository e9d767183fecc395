"""Cache entry domain entities."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached audio artifact.

    This is an internal representation used by services and repositories.
    For API contracts, use the DTO classes from the dto package.

    Attributes:
        payload: The audio bytes exactly as produced by the provider
        content_type: The provider's declared media type (e.g. audio/mpeg)
    """

    payload: bytes
    content_type: str

    @property
    def size(self) -> int:
        """Payload length in bytes."""
        return len(self.payload)


@dataclass(frozen=True)
class CacheRecord:
    """A stored entry together with its expiration metadata.

    Attributes:
        entry: The cached entry
        expires_at: Unix timestamp after which the entry is dead, None = never
        stored_at: Unix timestamp of the insertion
    """

    entry: CacheEntryEntity
    expires_at: float | None
    stored_at: float

    def is_expired(self, now: float) -> bool:
        """Check whether the record is past its deadline at ``now``."""
        return self.expires_at is not None and now > self.expires_at
