from __future__ import annotations

import asyncio
import itertools


class McpSession:
    """Per-process protocol state shared by the transport and the availability guard.

    Owns the request-correlation counter (ids start at 1 and are consumed only by
    parameter-bearing calls), the availability flag, the lock that serialises the
    initialization handshake, and the server-issued session id, if any.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._last_id = 0
        self.available = False
        self.session_id: str | None = None
        self._handshake_lock: asyncio.Lock | None = None

    def next_request_id(self) -> int:
        # Called synchronously on the event loop, so no await can interleave two increments.
        self._last_id = next(self._ids)
        return self._last_id

    @property
    def last_request_id(self) -> int:
        return self._last_id

    @property
    def handshake_lock(self) -> asyncio.Lock:
        # Created lazily so the session can be built outside a running loop.
        if self._handshake_lock is None:
            self._handshake_lock = asyncio.Lock()
        return self._handshake_lock

    def mark_available(self) -> None:
        self.available = True

    def mark_unavailable(self) -> None:
        self.available = False
        self.session_id = None
