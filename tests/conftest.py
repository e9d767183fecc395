"""Pytest fixtures for tts-cache tests."""

from collections.abc import AsyncIterator

import pytest

from tts_cache.config import Settings
from tts_cache.entities import CacheEntryEntity, Expiration, SynthesisParams
from tts_cache.exceptions import UpstreamError
from tts_cache.protocols import UpstreamAudio
from tts_cache.repositories import MemoryCacheRepository
from tts_cache.services import DURABLE, TEMPORARY, CacheService


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """Synthesis provider double returning canned audio."""

    def __init__(self, content_type: str = "audio/mpeg"):
        self.content_type = content_type
        self.chunks: list[bytes] = [b"ID3", b"-fake-", b"audio"]
        self.calls: list[SynthesisParams] = []
        self.fail_status: int | None = None
        self.fail_after: int | None = None
        self.closed_responses = 0
        self.closed = False
        self.upstream_time: str | None = "17"

    @property
    def name(self) -> str:
        return "fake"

    @property
    def audio(self) -> bytes:
        return b"".join(self.chunks)

    async def open_stream(self, params: SynthesisParams) -> UpstreamAudio:
        self.calls.append(params)
        if self.fail_status is not None:
            raise UpstreamError(f"Upstream returned {self.fail_status}", status_code=self.fail_status)
        return UpstreamAudio(
            content_type=self.content_type,
            chunks=self._body(),
            aclose=self._aclose,
            upstream_time=self.upstream_time,
        )

    async def _body(self) -> AsyncIterator[bytes]:
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise ConnectionResetError("connection reset by peer")
            yield chunk

    async def _aclose(self) -> None:
        self.closed_responses += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def durable_store(clock):
    """Create a durable tier on the fake clock."""
    return MemoryCacheRepository(name=DURABLE, clock=clock)


@pytest.fixture
def temporary_store(clock):
    """Create a temporary tier (300s TTL) on the fake clock."""
    return MemoryCacheRepository(
        name=TEMPORARY,
        default_expiration=Expiration.after(300),
        clock=clock,
    )


@pytest.fixture
def cache_service(durable_store, temporary_store):
    """Create a cache service without persistence."""
    return CacheService(durable=durable_store, temporary=temporary_store, temporary_ttl=300)


@pytest.fixture
def make_provider():
    """Factory for fake synthesis providers."""
    return FakeProvider


@pytest.fixture
def fake_provider(make_provider):
    """Create a fake synthesis provider."""
    return make_provider()


@pytest.fixture
def sample_entry():
    """Create a sample cache entry."""
    return CacheEntryEntity(payload=b"\x00\x01binary\xffaudio", content_type="audio/mpeg")


@pytest.fixture
def sample_params():
    """Create sample synthesis parameters."""
    return SynthesisParams(
        text="hello",
        language="en-US",
        gender="Female",
        name="en-US-JennyNeural",
        style="cheerful",
        credential="secret-key",
        region="westeurope",
    )


@pytest.fixture
def test_settings(tmp_path):
    """Create settings pointing the snapshot at a temp directory."""
    return Settings(
        persist_cache=True,
        cache_file=str(tmp_path / "cache-data.json"),
        temp_cache_ttl=300,
        temp_cache_sweep_interval=600,
    )
