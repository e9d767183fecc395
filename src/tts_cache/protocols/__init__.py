"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Azure → another provider, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from tts_cache.protocols import CacheStore, SynthesisProvider

    store: CacheStore = MemoryCacheRepository.create()
    provider: SynthesisProvider = AzureSpeechProvider.create()
    ```
"""

from .cache_store import CacheStore
from .synthesis_provider import SynthesisProvider, UpstreamAudio

__all__ = [
    "CacheStore",
    "SynthesisProvider",
    "UpstreamAudio",
]
