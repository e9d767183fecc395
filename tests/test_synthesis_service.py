"""Scenario tests for cache lookup, upstream exchange and capture."""

import dataclasses
import logging

import pytest

from tts_cache.exceptions import UpstreamError
from tts_cache.keys import build_cache_key
from tts_cache.services import CachedAudio, StreamingAudio, SynthesisService


@pytest.fixture
def service(cache_service, fake_provider):
    return SynthesisService(cache_service=cache_service, provider=fake_provider)


async def _drain(result: StreamingAudio) -> bytes:
    return b"".join([chunk async for chunk in result.chunks])


@pytest.mark.asyncio
async def test_durable_miss_then_hit(service, cache_service, fake_provider, sample_params):
    first = await service.synthesize(sample_params, retain_durably=True)

    assert isinstance(first, StreamingAudio)
    assert first.content_type == "audio/mpeg"
    assert await _drain(first) == fake_provider.audio
    assert len(fake_provider.calls) == 1
    assert cache_service.durable.get(build_cache_key(sample_params)) is not None

    second = await service.synthesize(sample_params, retain_durably=True)

    assert isinstance(second, CachedAudio)
    assert second.tier == "durable"
    assert second.entry.payload == fake_provider.audio
    assert second.entry.content_type == "audio/mpeg"
    assert len(fake_provider.calls) == 1


@pytest.mark.asyncio
async def test_temporary_entry_expires_and_reinvokes_upstream(
    service, cache_service, fake_provider, sample_params, clock
):
    await _drain(await service.synthesize(sample_params, retain_durably=False))
    key = build_cache_key(sample_params)

    assert cache_service.durable.get(key) is None
    assert cache_service.temporary.get(key) is not None

    hit = await service.synthesize(sample_params, retain_durably=False)
    assert isinstance(hit, CachedAudio) and hit.tier == "temporary"

    clock.advance(301)

    again = await service.synthesize(sample_params, retain_durably=False)
    assert isinstance(again, StreamingAudio)
    await _drain(again)
    assert len(fake_provider.calls) == 2


@pytest.mark.asyncio
async def test_voice_parameters_are_part_of_the_key(service, fake_provider, sample_params):
    await _drain(await service.synthesize(sample_params, retain_durably=True))

    other_voice = dataclasses.replace(sample_params, name="en-US-GuyNeural", gender="Male")
    result = await service.synthesize(other_voice, retain_durably=True)

    assert isinstance(result, StreamingAudio)
    await _drain(result)
    assert len(fake_provider.calls) == 2


@pytest.mark.asyncio
async def test_credentials_are_not_part_of_the_key(service, fake_provider, sample_params):
    await _drain(await service.synthesize(sample_params, retain_durably=True))

    other_account = dataclasses.replace(sample_params, credential="other", region="eastus")
    result = await service.synthesize(other_account, retain_durably=True)

    assert isinstance(result, CachedAudio)


@pytest.mark.asyncio
async def test_upstream_error_status_caches_nothing(service, cache_service, fake_provider, sample_params):
    fake_provider.fail_status = 401

    with pytest.raises(UpstreamError) as exc:
        await service.synthesize(sample_params, retain_durably=True)

    assert exc.value.status_code == 401
    assert cache_service.durable.item_count() == 0
    assert cache_service.temporary.item_count() == 0
    assert cache_service.metrics.upstream_failures == 1


@pytest.mark.asyncio
async def test_mid_stream_failure_caches_nothing(service, cache_service, fake_provider, sample_params):
    fake_provider.fail_after = 1
    result = await service.synthesize(sample_params, retain_durably=True)

    with pytest.raises(UpstreamError):
        await _drain(result)

    await result.fanout.wait()
    assert cache_service.durable.item_count() == 0
    assert fake_provider.closed_responses == 1


@pytest.mark.asyncio
async def test_abandoned_stream_is_still_cached(service, cache_service, fake_provider, sample_params):
    result = await service.synthesize(sample_params, retain_durably=True)
    await result.chunks.aclose()

    await service.drain(timeout=5)

    entry = cache_service.durable.get(build_cache_key(sample_params))
    assert entry is not None
    assert entry.payload == fake_provider.audio
    assert service.in_flight == 0


@pytest.mark.asyncio
async def test_miss_logs_upstream_time(service, sample_params, caplog):
    caplog.set_level(logging.INFO, logger="tts_cache.services.synthesis_service")

    await _drain(await service.synthesize(sample_params, retain_durably=False))

    assert "upstream_time=17" in caplog.text
