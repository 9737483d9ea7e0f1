"""Streaming responder: turn one computed answer into a paced chunk stream.

The stream always starts with a processing notice, sent before the answer
is computed. It then ends in exactly one of three ways:
- completed: the answer's words, then ``[DONE]``
- failed: an ``错误: <message>`` chunk, then ``[ERROR]``
- cancelled: the subscriber went away; nothing more is sent

Failures while producing the answer never escape as exceptions to the
subscriber. Cancellation (client disconnect, ``aclose()``) propagates and
stops the word session at once.
"""

from __future__ import annotations

import time
from contextlib import aclosing
from typing import TYPE_CHECKING, Awaitable, Callable

from raggate.runtime.observability import get_logger

from .adapters import DEFAULT_FRAME_DELAY, SSEAdapter
from .stream import DEFAULT_TOKEN_DELAY, ERROR_MARKER, ERROR_PREFIX, START_NOTICE, StreamSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

log = get_logger(__name__)

Producer = Callable[[], Awaitable[str]]


class StreamingResponder:
    """Builds paced, framed streams from an answer producer.

    Args:
        token_delay: Seconds between words (inner pacing)
        frame_delay: Seconds before every framed chunk (outer pacing)

    Example:
        >>> responder = StreamingResponder(token_delay=0, frame_delay=0)
        >>> [c async for c in responder.chunks(lambda: fetch_answer("hi"))]
        ['开始处理您的请求...', 'hello', ' world', '[DONE]']
    """

    __slots__ = ("_token_delay", "_adapter")

    def __init__(
        self,
        token_delay: float = DEFAULT_TOKEN_DELAY,
        frame_delay: float = DEFAULT_FRAME_DELAY,
    ) -> None:
        self._token_delay = token_delay
        self._adapter = SSEAdapter(frame_delay)

    @property
    def adapter(self) -> SSEAdapter:
        return self._adapter

    def open(self, full_text: str) -> StreamSession:
        """A started word session over ``full_text``."""
        return StreamSession(self._token_delay).start(full_text)

    async def chunks(self, produce: Producer) -> AsyncIterator[str]:
        """Unframed chunks: notice, then words and ``[DONE]``, or error chunks."""
        yield START_NOTICE
        start = time.perf_counter()
        try:
            text = await produce()
        except Exception as e:
            log.exception("stream producer failed", error=str(e))
            yield f"{ERROR_PREFIX}{e}"
            yield ERROR_MARKER
            return

        session = self.open(text)
        log.debug("stream opened", words=session.remaining,
                  produce_ms=round((time.perf_counter() - start) * 1000, 1))
        try:
            async with aclosing(session.__aiter__()) as words:
                async for chunk in words:
                    yield chunk
        finally:
            if session.cancelled:
                log.info("stream cancelled", emitted=session.cursor, remaining=session.remaining)
            session.cancel()

    async def stream(self, produce: Producer) -> AsyncIterator[str]:
        """Framed, paced chunks ready for an SSE response body."""
        async with aclosing(self.chunks(produce)) as chunks, aclosing(self._adapter.paced(chunks)) as events:
            async for event in events:
                yield event
