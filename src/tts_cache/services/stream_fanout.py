"""Single-pass fan-out of an upstream byte stream.

The upstream body is read exactly once by a producer task. Every chunk is
kept for the capture and handed to the attached client in order. When the
source is exhausted the captured chunks are joined into the payload of the
new cache entry.

If the client goes away the producer keeps reading, so the result is still
cached. If the upstream fails mid-stream the client stream raises and
nothing is captured.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import cast

from tts_cache.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_END = object()


class StreamFanout:
    """Copy one async byte stream to a client and to a capture buffer.

    Example:
        ```python
        fanout = StreamFanout(audio.chunks, audio.aclose, on_complete=commit)
        fanout.start()
        return StreamingResponse(fanout.client_stream(), media_type=audio.content_type)
        ```
    """

    def __init__(
        self,
        source: AsyncIterator[bytes],
        aclose: Callable[[], Awaitable[None]] | None = None,
        on_complete: Callable[[bytes], None] | None = None,
    ) -> None:
        """Initialize the fan-out.

        Args:
            source: Upstream body, read once.
            aclose: Releases the upstream response when reading is over.
            on_complete: Receives the full payload after a successful read.
        """
        self._source = source
        self._aclose = aclose
        self._on_complete = on_complete
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._captured: list[bytes] = []
        self._attached = True
        self._task: asyncio.Task[bytes | None] | None = None

    def start(self) -> asyncio.Task[bytes | None]:
        """Spawn the producer task. Must be called from a running event loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._produce())
        return self._task

    async def _produce(self) -> bytes | None:
        start = time.perf_counter()
        try:
            async for chunk in self._source:
                if not chunk:
                    continue
                self._captured.append(chunk)
                if self._attached:
                    self._queue.put_nowait(chunk)
        except Exception as e:
            logger.warning("Upstream stream failed after %d bytes: %s", self.captured_bytes, e)
            self._queue.put_nowait(e)
            return None
        finally:
            if self._aclose is not None:
                await self._aclose()

        payload = b"".join(self._captured)
        self._captured = [payload]
        logger.info(
            "Copied response to buffer: %d bytes in %.3fs", len(payload), time.perf_counter() - start
        )
        try:
            if self._on_complete is not None:
                self._on_complete(payload)
        finally:
            self._queue.put_nowait(_END)
        return payload

    async def client_stream(self) -> AsyncIterator[bytes]:
        """Yield the upstream chunks in order.

        Raises:
            UpstreamError: If the upstream fails before the end of the body
        """
        self.start()
        try:
            while True:
                item = await self._queue.get()
                if item is _END:
                    return
                if isinstance(item, Exception):
                    raise UpstreamError(f"Upstream stream interrupted: {item}") from item
                yield cast(bytes, item)
        finally:
            self.detach()

    def detach(self) -> None:
        """Stop feeding the client; the capture carries on."""
        if self._attached:
            self._attached = False
            # Drop chunks the client will never read
            while not self._queue.empty():
                self._queue.get_nowait()

    async def wait(self) -> bytes | None:
        """Wait for the producer to finish.

        Returns:
            The captured payload, or None if the upstream failed
        """
        return await self.start()

    @property
    def captured_bytes(self) -> int:
        return sum(len(chunk) for chunk in self._captured)
