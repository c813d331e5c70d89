"""
Incremental parser for the host's event streams (LLM tokens, OCR extraction).

The host frames events as `event: <name>` followed by `data: <json>` lines.
Bytes are decoded incrementally so multi-byte characters split across chunks
survive, partial lines are carried to the next read, and frames with a missing
name, the `</stream>` sentinel, or a payload that is not JSON are skipped
without interrupting the stream.
"""

from __future__ import annotations

import codecs
import enum
import json
import logging
import threading
from contextlib import aclosing, closing
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, Iterator

from ai_paralegal_sdk._errors import StreamUnsupportedError

EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "
STREAM_SENTINEL = "</stream>"

EventHandler = Callable[[str, Any], None]


@dataclass(frozen=True, slots=True)
class SSEEvent:
    """
    A single decoded frame: the event name and its JSON-decoded payload.
    """

    event: str
    data: Any


class StreamOutcome(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancellationToken:
    """
    Cooperative cancellation handle owned by the caller.

    The stream consumer only reads `cancelled`; it is polled before every read
    and before every frame dispatch. Safe to cancel from another thread.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _FrameState(enum.Enum):
    AWAITING_EVENT = "awaiting_event"
    HAVE_EVENT_AWAITING_DATA = "have_event_awaiting_data"


class StreamEventParser:
    """
    Two-state machine turning raw body chunks into `SSEEvent` frames.

    - `event:` stores the name and moves to HAVE_EVENT_AWAITING_DATA,
      replacing a name that never got its data line.
    - `data:` in AWAITING_EVENT is dropped.
    - `data:` in HAVE_EVENT_AWAITING_DATA yields a frame when the payload is
      JSON (never for the sentinel) and always returns to AWAITING_EVENT.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._state = _FrameState.AWAITING_EVENT
        self._event_name = ""

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def pending(self) -> str:
        """Unterminated text carried over to the next chunk."""
        return self._buffer

    def reset(self) -> None:
        self._decoder.reset()
        self._buffer = ""
        self._state = _FrameState.AWAITING_EVENT
        self._event_name = ""

    def feed(self, chunk: bytes) -> list[SSEEvent]:
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")

        frames: list[SSEEvent] = []
        for line in lines:
            frame = self._process_line(line.rstrip("\r"))
            if frame is not None:
                frames.append(frame)
        return frames

    def _process_line(self, line: str) -> SSEEvent | None:
        if line.startswith(EVENT_PREFIX):
            self._event_name = line[len(EVENT_PREFIX):].strip()
            self._state = (
                _FrameState.HAVE_EVENT_AWAITING_DATA if self._event_name else _FrameState.AWAITING_EVENT
            )
            return None

        if not line.startswith(DATA_PREFIX):
            return None

        if self._state is _FrameState.AWAITING_EVENT:
            logging.debug("SSE data line without event name dropped")
            return None

        name = self._event_name
        self._event_name = ""
        self._state = _FrameState.AWAITING_EVENT

        payload = line[len(DATA_PREFIX):].strip()
        if payload == STREAM_SENTINEL:
            return None

        try:
            data = json.loads(payload)
        except ValueError:
            logging.debug("SSE frame %r skipped: payload is not JSON", name)
            return None

        return SSEEvent(event=name, data=data)


def _is_cancelled(cancel: CancellationToken | None) -> bool:
    return cancel is not None and cancel.cancelled


def _open_sync_source(source: Any) -> tuple[Iterator[bytes], Callable[[], None]]:
    iter_bytes = getattr(source, "iter_bytes", None)
    if callable(iter_bytes):
        return iter_bytes(), source.close

    if source is None or isinstance(source, (bytes, bytearray, str)) or not isinstance(source, Iterable):
        raise StreamUnsupportedError("Response body is not readable; streaming is not supported")

    it = iter(source)

    def release() -> None:
        close = getattr(it, "close", None) or getattr(source, "close", None)
        if callable(close):
            close()

    return it, release


def _open_async_source(source: Any) -> tuple[AsyncIterator[bytes], Callable[[], Any]]:
    aiter_bytes = getattr(source, "aiter_bytes", None)
    if callable(aiter_bytes):
        return aiter_bytes(), source.aclose

    if source is None or not isinstance(source, AsyncIterable):
        raise StreamUnsupportedError("Response body is not readable; streaming is not supported")

    it = source.__aiter__()

    async def release() -> None:
        aclose = getattr(it, "aclose", None) or getattr(source, "aclose", None)
        if callable(aclose):
            await aclose()

    return it, release


class EventStream:
    """
    Iterator of `SSEEvent` frames read from one byte source.

    The source is released exactly once: when iteration ends, fails, is
    cancelled, or when `close()` is called, even before the first frame.
    `outcome` is set once the frames run out (None while still reading).
    """

    def __init__(
        self,
        chunks: Iterator[bytes],
        release: Callable[[], None],
        cancel: CancellationToken | None,
    ) -> None:
        self.outcome: StreamOutcome | None = None
        self._chunks = chunks
        self._release = release
        self._released = False
        self._cancel = cancel
        self._frames = self._run()

    def _release_once(self) -> None:
        if not self._released:
            self._released = True
            self._release()

    def _run(self) -> Iterator[SSEEvent]:
        parser = StreamEventParser()
        try:
            while not _is_cancelled(self._cancel):
                chunk = next(self._chunks, None)
                if chunk is None:
                    self.outcome = StreamOutcome.COMPLETED
                    return
                for frame in parser.feed(chunk):
                    if _is_cancelled(self._cancel):
                        break
                    yield frame
            self.outcome = StreamOutcome.CANCELLED
        finally:
            self._release_once()

    def __iter__(self) -> EventStream:
        return self

    def __next__(self) -> SSEEvent:
        return next(self._frames)

    def close(self) -> None:
        self._frames.close()
        # An unstarted generator skips its finally block on close.
        self._release_once()


class AsyncEventStream:
    """Async counterpart of `EventStream` (reads `aiter_bytes`, releases with `aclose`)."""

    def __init__(
        self,
        chunks: AsyncIterator[bytes],
        release: Callable[[], Awaitable[None]],
        cancel: CancellationToken | None,
    ) -> None:
        self.outcome: StreamOutcome | None = None
        self._chunks = chunks
        self._release = release
        self._released = False
        self._cancel = cancel
        self._frames = self._run()

    async def _release_once(self) -> None:
        if not self._released:
            self._released = True
            await self._release()

    async def _run(self) -> AsyncIterator[SSEEvent]:
        parser = StreamEventParser()
        try:
            while not _is_cancelled(self._cancel):
                chunk = await anext(self._chunks, None)
                if chunk is None:
                    self.outcome = StreamOutcome.COMPLETED
                    return
                for frame in parser.feed(chunk):
                    if _is_cancelled(self._cancel):
                        break
                    yield frame
            self.outcome = StreamOutcome.CANCELLED
        finally:
            await self._release_once()

    def __aiter__(self) -> AsyncEventStream:
        return self

    async def __anext__(self) -> SSEEvent:
        return await self._frames.__anext__()

    async def aclose(self) -> None:
        await self._frames.aclose()
        await self._release_once()


def iter_event_stream(source: Any, cancel: CancellationToken | None = None) -> EventStream:
    """
    Iterate the frames of a byte source.

    Args:
        source: An `httpx.Response` opened in streaming mode, or any iterable of bytes.
        cancel: Optional cancellation token polled before each read and each frame.

    Returns:
        An `EventStream`. Use it with `contextlib.closing` so the source is
        released even when iteration stops early.

    Raises:
        StreamUnsupportedError: Immediately, when the source cannot be read.
    """
    chunks, release = _open_sync_source(source)
    return EventStream(chunks, release, cancel)


def aiter_event_stream(source: Any, cancel: CancellationToken | None = None) -> AsyncEventStream:
    """Async counterpart of `iter_event_stream` (uses `aiter_bytes` / `aclose`)."""
    chunks, release = _open_async_source(source)
    return AsyncEventStream(chunks, release, cancel)


def consume_event_stream(
    source: Any,
    on_event: EventHandler,
    cancel: CancellationToken | None = None,
) -> StreamOutcome:
    """
    Read `source` to the end, calling `on_event(name, data)` once per frame.

    The handler runs synchronously; the next read starts only after it returns.
    Read errors from the source propagate after the source is released.
    A token cancelled after the last read still yields COMPLETED.
    """
    with closing(iter_event_stream(source, cancel)) as frames:
        for frame in frames:
            on_event(frame.event, frame.data)
    return frames.outcome or StreamOutcome.CANCELLED


async def aconsume_event_stream(
    source: Any,
    on_event: EventHandler,
    cancel: CancellationToken | None = None,
) -> StreamOutcome:
    async with aclosing(aiter_event_stream(source, cancel)) as frames:
        async for frame in frames:
            on_event(frame.event, frame.data)
    return frames.outcome or StreamOutcome.CANCELLED
