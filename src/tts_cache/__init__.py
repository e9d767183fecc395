"""TTS Cache - caching streaming proxy for text-to-speech synthesis.

This package provides a layered architecture for a two-tier audio cache:

Layers:
    - protocols: Interface contracts (CacheStore, SynthesisProvider)
    - repositories: Memory tiers, snapshot file, Azure Speech provider
    - services: Tiering, persistence, stream fan-out, orchestration
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from tts_cache.repositories import MemoryCacheRepository
    from tts_cache.services import CacheService

    cache = CacheService.create(
        durable=MemoryCacheRepository.create("durable"),
        temporary=MemoryCacheRepository.create("temporary", ttl=300),
    )
    ```

For HTTP API:
    ```python
    from tts_cache.api.app import app, create_app
    ```
"""

from tts_cache.config import Settings, settings
from tts_cache.dto import StatusResponse, SynthesisRequest
from tts_cache.entities import CacheEntryEntity, CacheRecord, Expiration, SynthesisParams
from tts_cache.exceptions import SnapshotDecodeError, SnapshotError, TtsCacheError, UpstreamError
from tts_cache.handlers import TtsHandler
from tts_cache.keys import build_cache_key
from tts_cache.protocols import CacheStore, SynthesisProvider
from tts_cache.repositories import AzureSpeechProvider, MemoryCacheRepository, SnapshotRepository
from tts_cache.services import CacheService, PersistenceService, StreamFanout, SynthesisService

__all__ = [
    # Configuration
    "Settings",
    "settings",
    # Protocols (interfaces)
    "CacheStore",
    "SynthesisProvider",
    # Services (business logic)
    "CacheService",
    "PersistenceService",
    "StreamFanout",
    "SynthesisService",
    # Handlers (HTTP)
    "TtsHandler",
    # Repositories (data access)
    "AzureSpeechProvider",
    "MemoryCacheRepository",
    "SnapshotRepository",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheRecord",
    "Expiration",
    "SynthesisParams",
    "build_cache_key",
    # DTOs (API contracts)
    "StatusResponse",
    "SynthesisRequest",
    # Errors
    "TtsCacheError",
    "UpstreamError",
    "SnapshotError",
    "SnapshotDecodeError",
]
