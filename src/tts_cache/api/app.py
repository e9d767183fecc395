import logging
from typing import Any

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tts_cache.api.dependencies import HandlerDep, create_lifespan
from tts_cache.config import Settings, settings
from tts_cache.dto import ClearCacheResponse, HealthCheckResponse, StatusResponse, SynthesisRequest
from tts_cache.protocols import SynthesisProvider

logger = logging.getLogger(__name__)

API_TITLE = "TTS Cache API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Caching streaming proxy for text-to-speech synthesis"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or incomplete requests as 400, like the legacy service."""
    errors = exc.errors()
    fields = [".".join(str(part) for part in error["loc"] if part != "body") for error in errors]
    detail = "; ".join(
        f"{field}: {error['msg']}" if field else error["msg"]
        for field, error in zip(fields, errors)
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail or "Invalid request"},
    )


def create_app(
    app_settings: Settings | None = None,
    provider: SynthesisProvider | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        app_settings: Configuration. Defaults to the environment settings.
        provider: Synthesis provider override, mainly for tests.

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=create_lifespan(app_settings or settings, provider),
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "tts": "/tts",
                "status": "/status",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.post("/tts", response_class=Response)
    async def tts(request: SynthesisRequest, handler: HandlerDep) -> Response:
        """Synthesize speech, serving from cache when possible."""
        return await handler.synthesize(request)

    @app.get("/status", response_model=StatusResponse)
    async def get_status(handler: HandlerDep) -> StatusResponse:
        """Cache size and process memory report."""
        return await handler.get_status()

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.delete("/cache/temporary", response_model=ClearCacheResponse)
    async def clear_temporary(handler: HandlerDep) -> ClearCacheResponse:
        """Drop every entry of the temporary tier."""
        return await handler.clear_temporary()

    return app


app = create_app()
