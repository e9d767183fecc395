"""HTTP handlers for synthesis and cache status.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, headers and error responses.
"""

import logging
from collections.abc import AsyncIterator

from fastapi import HTTPException, Response, status
from fastapi.responses import StreamingResponse

from tts_cache.diagnostics import process_memory_stats
from tts_cache.dto import (
    ClearCacheResponse,
    HealthCheckResponse,
    StatusResponse,
    SynthesisRequest,
)
from tts_cache.exceptions import UpstreamError
from tts_cache.services import CachedAudio, CacheService, SynthesisService

logger = logging.getLogger(__name__)

CACHE_HEADER = "X-Cache"


class TtsHandler:
    """HTTP handlers for text-to-speech and cache introspection.

    This handler delegates business logic to SynthesisService and
    CacheService and handles HTTP-specific concerns like:
    - Converting DTOs to entities
    - Choosing between a buffered and a streaming response
    - Mapping upstream failures to status codes

    Example:
        ```python
        handler = TtsHandler(synthesis_service=synthesis, cache_service=cache)

        @app.post("/tts")
        async def tts(request: SynthesisRequest):
            return await handler.synthesize(request)
        ```
    """

    def __init__(self, synthesis_service: SynthesisService, cache_service: CacheService) -> None:
        """Initialize the handler.

        Args:
            synthesis_service: Request orchestration (required).
            cache_service: Tiered cache, for status and admin calls (required).
        """
        self._synthesis = synthesis_service
        self._cache = cache_service

    async def synthesize(self, request: SynthesisRequest) -> Response:
        """Handle POST /tts requests.

        Args:
            request: The synthesis request DTO

        Returns:
            The cached audio, or a streaming response relaying the provider

        Raises:
            HTTPException: If the upstream exchange fails
        """
        try:
            result = await self._synthesis.synthesize(
                request.to_params(),
                retain_durably=request.should_cache,
            )
        except UpstreamError as e:
            logger.warning("Synthesis failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            ) from e

        if isinstance(result, CachedAudio):
            return Response(
                content=result.entry.payload,
                media_type=result.entry.content_type,
                headers={CACHE_HEADER: result.tier},
            )

        return StreamingResponse(
            self._relay(result.chunks),
            media_type=result.content_type,
            headers={CACHE_HEADER: "miss"},
        )

    async def _relay(self, chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
        """Forward streamed audio, ending the body early if the upstream breaks.

        Headers are already sent by then, so the client sees a truncated body.
        """
        try:
            async for chunk in chunks:
                yield chunk
        except UpstreamError as e:
            logger.warning("Streaming response truncated: %s", e)

    async def get_status(self) -> StatusResponse:
        """Handle GET /status requests.

        Returns:
            StatusResponse with cache and process memory figures
        """
        cache_status = self._cache.status()
        process = process_memory_stats()

        return StatusResponse(
            items_count=cache_status["items_count"],
            cache_memory_bytes=cache_status["cache_memory_bytes"],
            cache_memory=f"{cache_status['cache_memory_bytes'] / 1024 / 1024:f} mb",
            temporary_items_count=cache_status["temporary_items_count"],
            process_alloc_bytes=process["alloc_bytes"],
            process_total_alloc_bytes=process["total_alloc_bytes"],
            process_sys_bytes=process["sys_bytes"],
            gc_cycles=process["gc_cycles"],
            performance=self._cache.metrics.to_dict(),
        )

    async def clear_temporary(self) -> ClearCacheResponse:
        """Handle DELETE /cache/temporary requests.

        Returns:
            ClearCacheResponse with the number of dropped entries
        """
        count = self._cache.clear_temporary()
        return ClearCacheResponse(
            success=True,
            deleted_count=count,
            message="Temporary cache cleared successfully",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            HealthCheckResponse with service status
        """
        return HealthCheckResponse(
            status="healthy",
            persistence=self._cache.persistence_enabled,
            in_flight=self._synthesis.in_flight,
        )
