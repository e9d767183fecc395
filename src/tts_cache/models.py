from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track hit/miss counters for cache operations."""

    durable_hits: int = 0
    temporary_hits: int = 0
    misses: int = 0
    upstream_calls: int = 0
    upstream_failures: int = 0
    durable_commits: int = 0
    temporary_commits: int = 0

    @property
    def total_queries(self) -> int:
        return self.durable_hits + self.temporary_hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_queries == 0:
            return 0.0
        return (self.durable_hits + self.temporary_hits) / self.total_queries

    def record_hit(self, tier: str) -> None:
        """Record a cache hit in the given tier."""
        if tier == "durable":
            self.durable_hits += 1
        else:
            self.temporary_hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        self.misses += 1

    def record_upstream_call(self, success: bool) -> None:
        """Record an upstream synthesis exchange."""
        self.upstream_calls += 1
        if not success:
            self.upstream_failures += 1

    def record_commit(self, durable: bool) -> None:
        """Record a captured result written into a tier."""
        if durable:
            self.durable_commits += 1
        else:
            self.temporary_commits += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_queries": self.total_queries,
            "durable_hits": self.durable_hits,
            "temporary_hits": self.temporary_hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "upstream_calls": self.upstream_calls,
            "upstream_failures": self.upstream_failures,
            "durable_commits": self.durable_commits,
            "temporary_commits": self.temporary_commits,
        }
