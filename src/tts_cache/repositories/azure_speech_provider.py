"""Azure Cognitive Services Speech provider.

Sends an SSML document to the regional text-to-speech REST endpoint and
hands back the audio response unread, so the caller can stream it.

Endpoint:
    POST https://{region}.tts.speech.microsoft.com/cognitiveservices/v1

Requirements:
    - A Speech resource subscription key (sent per request)
    - The region the resource lives in, e.g. "westeurope"
"""

import logging
import time
from xml.sax.saxutils import escape, quoteattr

import httpx

from tts_cache.config import settings
from tts_cache.entities import SynthesisParams
from tts_cache.exceptions import UpstreamError
from tts_cache.protocols import UpstreamAudio

logger = logging.getLogger(__name__)


def build_ssml(params: SynthesisParams, prosody_rate: str) -> str:
    """Render the SSML body for a synthesis request.

    Args:
        params: The synthesis parameters
        prosody_rate: Speaking rate, e.g. "0.8"

    Returns:
        SSML document
    """
    voice_attrs = " ".join(
        [
            f"xml:lang={quoteattr(params.language)}",
            f"xml:gender={quoteattr(params.gender)}",
            f"name={quoteattr(params.name)}",
            f"style={quoteattr(params.style)}",
        ]
    )
    return (
        "<speak version='1.0' xml:lang='en-US'>"
        f"<voice {voice_attrs}>"
        f"<prosody rate={quoteattr(prosody_rate)}>{escape(params.text)}</prosody>"
        "</voice>"
        "</speak>"
    )


class AzureSpeechProvider:
    """Azure Speech implementation of SynthesisProvider protocol.

    This class satisfies the SynthesisProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = AzureSpeechProvider.create()
        audio = await provider.open_stream(params)
        try:
            async for chunk in audio.chunks:
                ...
        finally:
            await audio.aclose()
        ```
    """

    def __init__(
        self,
        endpoint_template: str | None = None,
        output_format: str | None = None,
        prosody_rate: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the Azure Speech provider.

        Args:
            endpoint_template: URL with a {region} placeholder.
                              Defaults to settings.tts_endpoint_template.
            output_format: Value of X-Microsoft-OutputFormat.
                          Defaults to settings.tts_output_format.
            prosody_rate: SSML prosody rate. Defaults to settings.tts_prosody_rate.
            user_agent: User-Agent header. Defaults to settings.tts_user_agent.
            timeout: Request timeout in seconds. Defaults to settings.upstream_timeout.
        """
        self._endpoint_template = endpoint_template or settings.tts_endpoint_template
        self._output_format = output_format or settings.tts_output_format
        self._prosody_rate = prosody_rate or settings.tts_prosody_rate
        self._user_agent = user_agent or settings.tts_user_agent
        self._timeout = timeout or settings.upstream_timeout
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        endpoint_template: str | None = None,
        output_format: str | None = None,
    ) -> "AzureSpeechProvider":
        """Factory method to create AzureSpeechProvider with defaults.

        Args:
            endpoint_template: Endpoint URL template. If None, uses settings.
            output_format: Audio output format. If None, uses settings.

        Returns:
            Configured AzureSpeechProvider
        """
        return cls(endpoint_template=endpoint_template, output_format=output_format)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def name(self) -> str:
        return "azure"

    def endpoint(self, region: str) -> str:
        """Get the synthesis URL for a region."""
        return self._endpoint_template.format(region=region)

    async def open_stream(self, params: SynthesisParams) -> UpstreamAudio:
        """Start a synthesis request and return the unread audio body.

        Args:
            params: The synthesis parameters

        Returns:
            UpstreamAudio whose chunks must be consumed or closed by the caller

        Raises:
            UpstreamError: If the request fails or Azure answers non-200
        """
        request = self.client.build_request(
            "POST",
            self.endpoint(params.region),
            content=build_ssml(params, self._prosody_rate).encode("utf-8"),
            headers={
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-OutputFormat": self._output_format,
                "Ocp-Apim-Subscription-Key": params.credential,
                "User-Agent": self._user_agent,
            },
        )

        start = time.perf_counter()
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request failed: {e}") from e

        upstream_time = response.headers.get("X-Envoy-Upstream-Service-Time")
        logger.info(
            "Received response from azure: status=%d upstream_time=%s elapsed=%.3fs",
            response.status_code,
            upstream_time,
            time.perf_counter() - start,
        )

        if response.status_code != httpx.codes.OK:
            await response.aclose()
            raise UpstreamError(
                f"Upstream returned {response.status_code}",
                status_code=response.status_code,
            )

        return UpstreamAudio(
            content_type=response.headers.get("Content-Type", "application/octet-stream"),
            chunks=response.aiter_bytes(),
            aclose=response.aclose,
            upstream_time=upstream_time,
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
