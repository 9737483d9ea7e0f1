"""Paced word streaming over an already-complete answer.

The answer is split on whitespace and handed out one word at a time with a
fixed delay between words. This is a presentation device, not model token
streaming: the full text exists before the first word goes out.

Lifecycle:
    PENDING --start()--> OPEN --words exhausted, emits [DONE]--> DRAINING --next call--> CLOSED
    any state --cancel()--> CLOSED   (no [DONE])
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

START_NOTICE = "开始处理您的请求..."
DONE_MARKER = "[DONE]"
ERROR_MARKER = "[ERROR]"
ERROR_PREFIX = "错误: "

DEFAULT_TOKEN_DELAY = 0.1


class StreamState(StrEnum):
    """Stream session states."""
    PENDING = "pending"
    OPEN = "open"
    DRAINING = "draining"
    CLOSED = "closed"


class StreamSession:
    """Hands out the words of one answer on a fixed cadence.

    Words after the first carry a leading space so the chunks concatenate
    back into readable text. Runs of whitespace collapse to one space.

    Example:
        >>> session = StreamSession(token_delay=0).start("alpha beta")
        >>> [chunk async for chunk in session]
        ['alpha', ' beta', '[DONE]']
    """

    __slots__ = ("_tokens", "_cursor", "_state", "_token_delay", "_cancelled")

    def __init__(self, token_delay: float = DEFAULT_TOKEN_DELAY) -> None:
        if token_delay < 0:
            raise ValueError("token_delay must be >= 0")
        self._tokens: list[str] = []
        self._cursor = 0
        self._state = StreamState.PENDING
        self._token_delay = token_delay
        self._cancelled = asyncio.Event()

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def cursor(self) -> int:
        """Number of words emitted so far."""
        return self._cursor

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._cursor

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self, full_text: str) -> StreamSession:
        """Tokenize ``full_text`` and open the session. A session starts once."""
        if self._state is not StreamState.PENDING:
            raise RuntimeError(f"stream session already started (state={self._state})")
        self._tokens = full_text.split()
        self._state = StreamState.OPEN
        return self

    def cancel(self) -> None:
        """Close immediately without the done marker. Wakes a pending delay."""
        self._state = StreamState.CLOSED
        self._cancelled.set()

    async def _pause(self) -> None:
        if self._token_delay <= 0:
            return
        try:
            async with asyncio.timeout(self._token_delay):
                await self._cancelled.wait()
        except TimeoutError:
            pass

    async def emit_next(self) -> str | None:
        """Next chunk, the done marker once words run out, then None forever.

        Returns None as soon as the session is cancelled, including while
        waiting out the inter-word delay.
        """
        if self._state is StreamState.DRAINING:
            self._state = StreamState.CLOSED
        if self._state is not StreamState.OPEN:
            return None
        if self._cursor > 0:
            await self._pause()
            if self._state is not StreamState.OPEN:
                return None

        if self._cursor < len(self._tokens):
            token = self._tokens[self._cursor]
            chunk = token if self._cursor == 0 else f" {token}"
            self._cursor += 1
            return chunk

        # Done marker goes out while draining; the next call closes.
        self._state = StreamState.DRAINING
        return DONE_MARKER

    async def __aiter__(self) -> AsyncIterator[str]:
        try:
            while (chunk := await self.emit_next()) is not None:
                yield chunk
        finally:
            if self._state is not StreamState.CLOSED:
                self.cancel()
