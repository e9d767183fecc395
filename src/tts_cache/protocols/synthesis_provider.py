"""Synthesis provider protocol.

Defines the interface for any upstream text-to-speech service. The cache
treats the provider as an opaque exchange: parameters in, a content type
and a byte stream out.

Implementations can include:
- Azure Cognitive Services Speech (default)
- Test doubles producing canned audio
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tts_cache.entities import SynthesisParams


@dataclass
class UpstreamAudio:
    """An open upstream response whose body has not been read yet.

    Attributes:
        content_type: Media type declared by the provider
        chunks: The response body, read once
        aclose: Releases the underlying connection; safe to call twice
        upstream_time: Provider-reported processing time, if any
    """

    content_type: str
    chunks: AsyncIterator[bytes]
    aclose: Callable[[], Awaitable[None]]
    upstream_time: str | None = None


@runtime_checkable
class SynthesisProvider(Protocol):
    """Protocol for upstream synthesis services."""

    @property
    def name(self) -> str:
        """Return the provider identifier."""
        ...

    async def open_stream(self, params: SynthesisParams) -> UpstreamAudio:
        """Start a synthesis exchange and return its unread body.

        Args:
            params: The synthesis parameters

        Returns:
            The open upstream response

        Raises:
            UpstreamError: On transport failure or a non-success status.
                No body is returned in that case.
        """
        ...

    async def close(self) -> None:
        """Release client resources at shutdown."""
        ...
