"""Tests for the single-pass stream fan-out."""

import asyncio
import os
from collections.abc import AsyncIterator

import pytest

from tts_cache.exceptions import UpstreamError
from tts_cache.services import StreamFanout


async def _chunked(data: bytes, size: int) -> AsyncIterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start : start + size]
        await asyncio.sleep(0)


async def _collect(stream: AsyncIterator[bytes]) -> bytes:
    received = bytearray()
    async for chunk in stream:
        received.extend(chunk)
    return bytes(received)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [b"", b"\x7f", os.urandom(3 * 1024 * 1024 + 17)],
    ids=["empty", "single-byte", "multi-megabyte"],
)
async def test_client_and_capture_receive_identical_bytes(data):
    captured: list[bytes] = []
    closed = []

    async def aclose():
        closed.append(True)

    fanout = StreamFanout(_chunked(data, 64 * 1024), aclose, on_complete=captured.append)
    fanout.start()

    delivered = await _collect(fanout.client_stream())

    assert delivered == data
    assert captured == [data]
    assert await fanout.wait() == data
    assert closed == [True]


@pytest.mark.asyncio
async def test_chunk_order_is_preserved():
    chunks = [f"{i:05d}".encode() for i in range(1000)]

    async def source():
        for chunk in chunks:
            yield chunk

    captured: list[bytes] = []
    fanout = StreamFanout(source(), on_complete=captured.append)

    delivered = [chunk async for chunk in fanout.client_stream()]

    assert delivered == chunks
    assert captured == [b"".join(chunks)]


@pytest.mark.asyncio
async def test_commit_happens_before_client_sees_end():
    events: list[str] = []
    fanout = StreamFanout(_chunked(b"abcdef", 2), on_complete=lambda _: events.append("commit"))

    async for _ in fanout.client_stream():
        pass
    events.append("client-done")

    assert events == ["commit", "client-done"]


@pytest.mark.asyncio
async def test_client_disconnect_still_captures():
    gate = asyncio.Event()
    data = [b"one", b"two", b"three", b"four"]

    async def source():
        yield data[0]
        await gate.wait()
        for chunk in data[1:]:
            yield chunk

    captured: list[bytes] = []
    fanout = StreamFanout(source(), on_complete=captured.append)
    stream = fanout.client_stream()

    assert await stream.__anext__() == b"one"
    await stream.aclose()  # client went away
    gate.set()

    assert await fanout.wait() == b"onetwothreefour"
    assert captured == [b"onetwothreefour"]


@pytest.mark.asyncio
async def test_upstream_failure_reaches_client_and_skips_commit():
    closed = []

    async def source():
        yield b"partial"
        raise ConnectionResetError("connection reset by peer")

    async def aclose():
        closed.append(True)

    captured: list[bytes] = []
    fanout = StreamFanout(source(), aclose, on_complete=captured.append)

    received = []
    with pytest.raises(UpstreamError):
        async for chunk in fanout.client_stream():
            received.append(chunk)

    assert received == [b"partial"]
    assert captured == []
    assert await fanout.wait() is None
    assert closed == [True]


@pytest.mark.asyncio
async def test_empty_chunks_are_skipped():
    async def source():
        for chunk in [b"", b"a", b"", b"b"]:
            yield chunk

    fanout = StreamFanout(source())

    assert [chunk async for chunk in fanout.client_stream()] == [b"a", b"b"]
