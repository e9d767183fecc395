"""Per-entry expiration policy."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Expiration:
    """Expiration policy attached to an entry at insertion time.

    ``seconds=None`` means the entry never expires.

    Example:
        ```python
        store.set(key, entry, Expiration.never())
        store.set(key, entry, Expiration.after(300))
        ```
    """

    seconds: float | None = None

    def __post_init__(self) -> None:
        if self.seconds is not None and self.seconds <= 0:
            raise ValueError(f"Expiration must be positive, got {self.seconds}")

    @classmethod
    def never(cls) -> "Expiration":
        """Entry stays until overwritten or deleted."""
        return cls(seconds=None)

    @classmethod
    def after(cls, seconds: float) -> "Expiration":
        """Entry expires ``seconds`` after insertion."""
        return cls(seconds=seconds)

    def deadline(self, now: float) -> float | None:
        """Absolute expiry timestamp for an entry inserted at ``now``."""
        if self.seconds is None:
            return None
        return now + self.seconds
