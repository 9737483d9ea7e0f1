"""Streaming of computed answers as paced, framed chunks.

- StreamSession: word-by-word pacing with cancellation
- SSEAdapter: ``data: ...`` framing and per-frame pacing
- StreamingResponder: notice, words, and terminal marker for one answer
"""

from .adapters import DEFAULT_FRAME_DELAY, SSE_MEDIA_TYPE, SSEAdapter
from .responder import Producer, StreamingResponder
from .stream import (
    DEFAULT_TOKEN_DELAY,
    DONE_MARKER,
    ERROR_MARKER,
    ERROR_PREFIX,
    START_NOTICE,
    StreamSession,
    StreamState,
)

__all__ = [
    "DEFAULT_FRAME_DELAY", "SSE_MEDIA_TYPE", "SSEAdapter",
    "Producer", "StreamingResponder",
    "DEFAULT_TOKEN_DELAY", "DONE_MARKER", "ERROR_MARKER", "ERROR_PREFIX", "START_NOTICE",
    "StreamSession", "StreamState",
]
