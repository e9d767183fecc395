"""Repository layer for data access.

This layer abstracts external dependencies (memory, the snapshot file,
the synthesis provider) behind protocol-based interfaces. This enables:
- Easy swapping of implementations
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from tts_cache.protocols import CacheStore, SynthesisProvider

from .azure_speech_provider import AzureSpeechProvider, build_ssml
from .memory_repository import MemoryCacheRepository
from .snapshot_repository import SnapshotRepository

__all__ = [
    "CacheStore",
    "SynthesisProvider",
    "AzureSpeechProvider",
    "MemoryCacheRepository",
    "SnapshotRepository",
    "build_ssml",
]
