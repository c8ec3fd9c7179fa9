from dataclasses import dataclass


@dataclass
class CacheMetrics:
    """Track hit/miss and inference counters for one orchestrator."""

    tier_one_hits: int = 0
    tier_two_hits: int = 0
    cache_misses: int = 0
    inference_calls: int = 0
    inference_failures: int = 0
    skipped_identical: int = 0
    cache_write_failures: int = 0
    total_inference_time_ms: float = 0.0

    @property
    def total_queries(self) -> int:
        """Lookups that reached the cache (skips excluded)."""
        return self.tier_one_hits + self.tier_two_hits + self.cache_misses

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate across both tiers."""
        if self.total_queries == 0:
            return 0.0
        return (self.tier_one_hits + self.tier_two_hits) / self.total_queries

    @property
    def avg_inference_time_ms(self) -> float:
        """Calculate average provider latency."""
        if self.inference_calls == 0:
            return 0.0
        return self.total_inference_time_ms / self.inference_calls

    def record_hit(self, tier: str) -> None:
        """Record a cache hit in ``tier_one`` or ``tier_two``."""
        if tier == "tier_one":
            self.tier_one_hits += 1
        else:
            self.tier_two_hits += 1

    def record_miss(self) -> None:
        """Record a miss in both tiers."""
        self.cache_misses += 1

    def record_inference(self, duration_ms: float) -> None:
        """Record a successful provider call."""
        self.inference_calls += 1
        self.total_inference_time_ms += duration_ms

    def record_failure(self) -> None:
        """Record a request that failed after retries."""
        self.inference_failures += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_queries": self.total_queries,
            "tier_one_hits": self.tier_one_hits,
            "tier_two_hits": self.tier_two_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "inference_calls": self.inference_calls,
            "inference_failures": self.inference_failures,
            "skipped_identical": self.skipped_identical,
            "cache_write_failures": self.cache_write_failures,
            "avg_inference_time_ms": self.avg_inference_time_ms,
        }
