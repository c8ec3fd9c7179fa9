"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the durable tier (Redis, in-memory, a document database)
- Swapping the inference provider
- Unit testing with stub implementations
"""

from .entry_store import EntryStore
from .inference_client import InferenceClient

__all__ = [
    "EntryStore",
    "InferenceClient",
]
