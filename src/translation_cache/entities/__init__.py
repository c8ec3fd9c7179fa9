"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .batch import BatchJob, ErrorRecord
from .cache_entry import CacheEntryEntity
from .cache_key import CacheKey
from .inference import InferenceRequest, InferenceResult

__all__ = [
    "BatchJob",
    "CacheEntryEntity",
    "CacheKey",
    "ErrorRecord",
    "InferenceRequest",
    "InferenceResult",
]
