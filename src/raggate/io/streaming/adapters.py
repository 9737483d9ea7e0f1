"""Transport adapter for streamed chat responses.

Chunks go out as Server-Sent-Events data lines, one event per chunk:

    data: 开始处理您的请求...

    data: alpha

    data:  beta

    data: [DONE]

A chunk containing line breaks stays one event, spread over several
``data:`` lines, so chunk text can never end an event early.

Every framed chunk is preceded by a small fixed delay, independent of the
word delay inside ``StreamSession``.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

DEFAULT_FRAME_DELAY = 0.05
SSE_MEDIA_TYPE = "text/event-stream"

# SSE treats CRLF, CR and LF alike as line ends
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class SSEAdapter:
    """Frame chunks as SSE ``data:`` events with outer pacing.

    Args:
        frame_delay: Seconds to wait before each framed chunk
    """

    __slots__ = ("_frame_delay",)

    media_type = SSE_MEDIA_TYPE

    def __init__(self, frame_delay: float = DEFAULT_FRAME_DELAY) -> None:
        if frame_delay < 0:
            raise ValueError("frame_delay must be >= 0")
        self._frame_delay = frame_delay

    @property
    def frame_delay(self) -> float:
        return self._frame_delay

    @staticmethod
    def frame(chunk: str) -> str:
        """One SSE event. Each line of ``chunk`` gets its own ``data:`` field."""
        return "".join(f"data: {line}\n" for line in _LINE_BREAK.split(chunk)) + "\n"

    @staticmethod
    def unframe(event: str) -> str:
        """Inverse of ``frame`` for a single event."""
        if not event.endswith("\n\n"):
            raise ValueError(f"not a framed chunk: {event!r}")
        lines = event[:-2].split("\n")
        if not all(line.startswith("data: ") for line in lines):
            raise ValueError(f"not a framed chunk: {event!r}")
        return "\n".join(line[len("data: "):] for line in lines)

    async def paced(self, chunks: AsyncIterable[str]) -> AsyncIterator[str]:
        """Frame each chunk, sleeping ``frame_delay`` before each one."""
        async for chunk in chunks:
            if self._frame_delay > 0:
                await asyncio.sleep(self._frame_delay)
            yield self.frame(chunk)
