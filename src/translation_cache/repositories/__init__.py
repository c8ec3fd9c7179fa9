"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the inference provider)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> in-memory, OpenAI -> another provider)
- Unit testing with stub implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from translation_cache.protocols import EntryStore, InferenceClient

from .memory_entry_repository import InMemoryEntryRepository
from .openai_inference_client import OpenAIInferenceClient
from .redis_entry_repository import RedisEntryRepository

__all__ = [
    "EntryStore",
    "InferenceClient",
    "InMemoryEntryRepository",
    "OpenAIInferenceClient",
    "RedisEntryRepository",
]
