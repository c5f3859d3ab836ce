"""Pass-through log streams.

A PassThroughStreamer relays the bytes of a pod log to the caller without
storing them. In follow mode every chunk is handed on as soon as it arrives;
otherwise chunks are coalesced into larger buffers until the source ends.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Coroutine
from typing import Any, TypeVar

from loguru import logger

from src.app.core.services.deploylog.errors import RequestCancelled
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.k8s.controller import PodLogOptions, PodStore

T = TypeVar("T")


class PassThroughStreamer:
    """Forward-only byte stream over a pod log.

    Attributes:
        flush: Hand on every chunk immediately (follow mode)
        content_type: Media type of the stream
    """

    def __init__(
        self,
        source: AsyncIterator[bytes] | None,
        *,
        flush: bool = False,
        content_type: str = DEFAULT_CONSTANTS.LOG_CONTENT_TYPE,
        buffer_size: int = DEFAULT_CONSTANTS.DEFAULT_BUFFER_SIZE,
        cancel: asyncio.Event | None = None,
    ) -> None:
        self.flush = flush
        self.content_type = content_type
        self._source = source
        self._buffer_size = buffer_size
        self._cancel = cancel
        self._consumed = False
        self._closed = False

    @classmethod
    def empty(cls) -> PassThroughStreamer:
        """A stream with no content, for deployments that have not started."""
        return cls(None)

    @property
    def is_empty(self) -> bool:
        return self._source is None

    def __aiter__(self) -> AsyncGenerator[bytes, None]:
        if self._consumed:
            raise RuntimeError("log stream has already been consumed")
        self._consumed = True
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncGenerator[bytes, None]:
        if self._source is None:
            return

        buffer = bytearray()
        try:
            while True:
                chunk = await until_cancelled(_pull(self._source), self._cancel)
                if chunk is None:
                    break
                if not chunk:
                    continue
                if self.flush:
                    yield chunk
                    continue
                buffer.extend(chunk)
                while len(buffer) >= self._buffer_size:
                    yield bytes(buffer[: self._buffer_size])
                    del buffer[: self._buffer_size]
            if buffer:
                yield bytes(buffer)
        finally:
            await self.aclose()

    async def read(self) -> bytes:
        """Read the whole stream. Only sensible when not following."""
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        """Close the underlying source. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


async def open_log_stream(
    store: PodStore,
    namespace: str,
    pod_name: str,
    options: PodLogOptions,
    *,
    buffer_size: int = DEFAULT_CONSTANTS.DEFAULT_BUFFER_SIZE,
    cancel: asyncio.Event | None = None,
) -> PassThroughStreamer:
    """Open a pod's log and wrap it for pass-through delivery.

    Errors raised while opening the log are propagated unchanged. Opening
    waits for the log endpoint to answer, which ``cancel`` can cut short.
    """
    logger.debug(
        f"Opening log stream for pod {namespace}/{pod_name} (follow={options.follow})"
    )
    source = await until_cancelled(
        store.open_log_stream(namespace, pod_name, options), cancel
    )
    return PassThroughStreamer(
        source,
        flush=options.follow,
        buffer_size=buffer_size,
        cancel=cancel,
    )


async def _pull(source: AsyncIterator[bytes]) -> bytes | None:
    """Next chunk from ``source``, or None once it is exhausted."""
    try:
        return await anext(source)
    except StopAsyncIteration:
        return None


async def until_cancelled(
    operation: Coroutine[Any, Any, T], cancel: asyncio.Event | None
) -> T:
    """Await ``operation``, abandoning it as soon as ``cancel`` is set.

    A follow stream from an idle pod may not produce a chunk for a long
    time, so waiting for the next chunk must not delay cancellation.

    Raises:
        RequestCancelled: ``cancel`` was set before ``operation`` finished
    """
    if cancel is None:
        return await operation
    if cancel.is_set():
        operation.close()
        raise RequestCancelled("request cancelled")

    work = asyncio.ensure_future(operation)
    cancelled = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancelled.cancel()
        if not work.done():
            work.cancel()
            # Let the source see the cancellation before it is closed
            await asyncio.wait({work})

    if work.cancelled():
        raise RequestCancelled("request cancelled")
    return work.result()
