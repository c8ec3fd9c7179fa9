"""Batch job domain entities."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class BatchJob:
    """One input fanned out to several target variants.

    Attributes:
        input: The source text
        source_variant: Source language code, or None for auto-detect
        target_variants: Target language codes; duplicates are collapsed
        concurrency_limit: Maximum number of variants processed at once
    """

    input: str
    source_variant: str | None
    target_variants: frozenset[str]
    concurrency_limit: int = 2

    @classmethod
    def create(
        cls,
        input: str,
        source_variant: str | None,
        target_variants: list[str] | tuple[str, ...] | set[str] | frozenset[str],
        concurrency_limit: int = 2,
    ) -> "BatchJob":
        """Build a job, normalizing the variant collection to a frozenset."""
        return cls(
            input=input,
            source_variant=source_variant,
            target_variants=frozenset(target_variants),
            concurrency_limit=concurrency_limit,
        )


@dataclass(frozen=True)
class ErrorRecord:
    """Failure placeholder for one variant in a batch result map.

    Attributes:
        variant: The target variant that failed
        kind: Failure class from the taxonomy (e.g. ``rate_limited``)
        message: Human-readable failure detail
        attempts: Attempts made before giving up
        at: Unix timestamp of the failure
    """

    variant: str
    kind: str
    message: str
    attempts: int = 1
    at: float = field(default_factory=time.time)
