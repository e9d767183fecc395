"""Synthesis service: cache lookup, upstream exchange and capture.

Business flow for one request:
1. Derive the cache key from the synthesis parameters
2. Probe the durable tier, then the temporary tier
3. On a miss, open the upstream exchange and fan its body out to the
   caller and to a capture buffer
4. Commit the captured bytes to the tier the request asked for
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from tts_cache.entities import CacheEntryEntity, SynthesisParams
from tts_cache.exceptions import UpstreamError
from tts_cache.keys import build_cache_key
from tts_cache.protocols import SynthesisProvider
from tts_cache.services.cache_service import CacheService
from tts_cache.services.stream_fanout import StreamFanout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedAudio:
    """A cache hit, ready to be sent in one piece."""

    entry: CacheEntryEntity
    tier: str


@dataclass(frozen=True)
class StreamingAudio:
    """A cache miss being streamed from the provider."""

    content_type: str
    chunks: AsyncIterator[bytes]
    fanout: StreamFanout


class SynthesisService:
    """Serve synthesis requests from cache or from the provider.

    Concurrent identical misses are not de-duplicated: each performs its
    own upstream exchange and the last commit wins.

    Example:
        ```python
        service = SynthesisService(cache_service=cache, provider=AzureSpeechProvider.create())
        result = await service.synthesize(params, retain_durably=True)
        ```
    """

    def __init__(self, cache_service: CacheService, provider: SynthesisProvider) -> None:
        """Initialize the synthesis service.

        Args:
            cache_service: Tiered cache (required).
            provider: Upstream synthesis provider (required).
        """
        self._cache = cache_service
        self._provider = provider
        self._captures: set[asyncio.Task[bytes | None]] = set()

    async def synthesize(
        self,
        params: SynthesisParams,
        retain_durably: bool,
    ) -> CachedAudio | StreamingAudio:
        """Return cached audio or start streaming it from the provider.

        Args:
            params: The synthesis parameters
            retain_durably: Whether a fresh result goes to the durable tier

        Returns:
            CachedAudio on a hit, StreamingAudio on a miss

        Raises:
            UpstreamError: If the upstream exchange fails before the body starts.
                Nothing is cached in that case.
        """
        key = build_cache_key(params)

        hit = self._cache.lookup(key)
        if hit is not None:
            logger.debug("Cache hit in %s tier for %d-char text", hit.tier, len(params.text))
            return CachedAudio(entry=hit.entry, tier=hit.tier)

        try:
            audio = await self._provider.open_stream(params)
        except UpstreamError:
            self._cache.metrics.record_upstream_call(success=False)
            raise
        self._cache.metrics.record_upstream_call(success=True)
        logger.info(
            "Streaming from %s: content_type=%s upstream_time=%s",
            self._provider.name,
            audio.content_type,
            audio.upstream_time,
        )

        content_type = audio.content_type

        def commit(payload: bytes) -> None:
            entry = CacheEntryEntity(payload=payload, content_type=content_type)
            self._cache.commit(key, entry, retain_durably)

        fanout = StreamFanout(audio.chunks, audio.aclose, on_complete=commit)
        task = fanout.start()
        self._captures.add(task)
        task.add_done_callback(self._capture_done)

        return StreamingAudio(
            content_type=content_type,
            chunks=fanout.client_stream(),
            fanout=fanout,
        )

    def _capture_done(self, task: asyncio.Task[bytes | None]) -> None:
        self._captures.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Capture task failed", exc_info=error)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight captures to finish, cancelling stragglers.

        Args:
            timeout: Seconds to wait before cancelling. None waits indefinitely.
        """
        if not self._captures:
            return

        pending = set(self._captures)
        logger.info("Waiting for %d in-flight captures", len(pending))
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)

    @property
    def in_flight(self) -> int:
        """Number of captures still reading from the provider."""
        return len(self._captures)
