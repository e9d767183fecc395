"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from tts_cache.services import CacheService, SynthesisService

    cache = CacheService.create(durable=durable, temporary=temporary)
    service = SynthesisService(cache_service=cache, provider=provider)
    ```
"""

from .cache_service import DURABLE, TEMPORARY, CacheHit, CacheService
from .persistence_service import PersistenceService
from .stream_fanout import StreamFanout
from .synthesis_service import CachedAudio, StreamingAudio, SynthesisService

__all__ = [
    "DURABLE",
    "TEMPORARY",
    "CacheHit",
    "CacheService",
    "CachedAudio",
    "PersistenceService",
    "StreamFanout",
    "StreamingAudio",
    "SynthesisService",
]
