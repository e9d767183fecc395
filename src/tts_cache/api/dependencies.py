"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from tts_cache.config import Settings, settings as default_settings
from tts_cache.handlers import TtsHandler
from tts_cache.protocols import SynthesisProvider
from tts_cache.repositories import AzureSpeechProvider, MemoryCacheRepository, SnapshotRepository
from tts_cache.services import (
    DURABLE,
    TEMPORARY,
    CacheService,
    PersistenceService,
    SynthesisService,
)

logger = logging.getLogger(__name__)

# Seconds to let in-flight captures finish on shutdown before cancelling them
SHUTDOWN_DRAIN_TIMEOUT = 10.0


def get_handler(request: Request) -> TtsHandler:
    """Dependency injection for TtsHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The TtsHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "tts_handler", None)
    if handler is None:
        raise RuntimeError("TtsHandler not initialized. Check lifespan setup.")
    return handler


def create_lifespan(
    settings: Settings | None = None,
    provider: SynthesisProvider | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for the app.

    Args:
        settings: Configuration. Defaults to the environment settings.
        provider: Synthesis provider. Defaults to AzureSpeechProvider.

    Returns:
        A lifespan callable for FastAPI(lifespan=...)
    """
    config = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifespan context manager for FastAPI app.

        Initializes all layers and stores in app.state:
        1. Repositories (durable/temporary tiers, snapshot file, provider)
        2. Persistence - loads the snapshot; a corrupt snapshot aborts startup
        3. Services - stored in app.state.cache_service / synthesis_service
        4. Handler (HTTP endpoints) - stored in app.state.tts_handler

        Cleanup:
            Drains in-flight captures, writes a final snapshot, stops the
            janitor and closes the provider client.
        """
        durable = MemoryCacheRepository.create(DURABLE)
        temporary = MemoryCacheRepository.create(
            TEMPORARY,
            ttl=config.temp_cache_ttl,
            sweep_interval=config.temp_cache_sweep_interval,
        )

        persistence: PersistenceService | None = None
        if config.persist_cache:
            persistence = PersistenceService(SnapshotRepository.create(config.cache_file), durable)
            persistence.load()
            persistence.start()
        else:
            logger.info("Cache persistence disabled")

        temporary.start_janitor()

        synthesis_provider = provider or AzureSpeechProvider(
            endpoint_template=config.tts_endpoint_template,
            output_format=config.tts_output_format,
            prosody_rate=config.tts_prosody_rate,
            user_agent=config.tts_user_agent,
            timeout=config.upstream_timeout,
        )

        cache_service = CacheService.create(
            durable=durable,
            temporary=temporary,
            persistence=persistence,
            temporary_ttl=config.temp_cache_ttl,
        )
        synthesis_service = SynthesisService(
            cache_service=cache_service,
            provider=synthesis_provider,
        )
        tts_handler = TtsHandler(
            synthesis_service=synthesis_service,
            cache_service=cache_service,
        )

        # Store in app.state (FastAPI pattern)
        app.state.cache_service = cache_service
        app.state.synthesis_service = synthesis_service
        app.state.tts_handler = tts_handler
        app.state.persistence = persistence

        logger.info(
            "TTS cache ready: provider=%s durable_items=%d persistence=%s",
            synthesis_provider.name,
            durable.item_count(),
            "on" if persistence is not None else "off",
        )

        try:
            yield
        finally:
            await synthesis_service.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
            if persistence is not None:
                persistence.stop(final_save=True)
            temporary.close()
            await synthesis_provider.close()

            del app.state.tts_handler
            del app.state.synthesis_service
            del app.state.cache_service
            del app.state.persistence
            logger.info("TTS cache shut down")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[TtsHandler, Depends(get_handler)]
