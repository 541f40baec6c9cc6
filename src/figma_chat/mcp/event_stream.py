"""Recovery of a JSON-RPC reply from a ``text/event-stream`` response body.

The server answers a POST either with a plain JSON document or with an event
stream. Only the first ``data:`` frame matters: its prefix is stripped, and every
line after it is appended verbatim (joined by newlines, no separator in front).
That keeps single-line frames working and deliberately does not try to merge
multi-line ``data:`` frames.

The line directly after the first frame is kept as well. Earlier clients of
this server dropped it; keeping it means a frame followed by anything other
than a blank line still reassembles into every byte the server sent.
"""

from __future__ import annotations

import enum
from typing import Iterable

DATA_PREFIX = "data:"


class _State(enum.Enum):
    SEEKING_DATA = "seeking_data"
    ACCUMULATING = "accumulating"


class EventStreamParser:
    """Line-driven two-state parser for the first data frame."""

    def __init__(self) -> None:
        self._state = _State.SEEKING_DATA
        self._head = ""
        self._rest: list[str] = []

    @property
    def found(self) -> bool:
        return self._state is _State.ACCUMULATING

    def feed(self, line: str) -> None:
        if self._state is _State.SEEKING_DATA:
            if line.startswith(DATA_PREFIX):
                self._head = line.split(":", 1)[1]
                self._state = _State.ACCUMULATING
            return
        self._rest.append(line)

    def feed_lines(self, lines: Iterable[str]) -> "EventStreamParser":
        for line in lines:
            self.feed(line)
        return self

    def payload(self) -> str | None:
        """Reassembled payload text, or ``None`` if no data line was seen."""
        if not self.found:
            return None
        return (self._head + "\n".join(self._rest)).strip()


def is_event_stream(body: str, content_type: str | None = None) -> bool:
    if content_type and "text/event-stream" in content_type.lower():
        return True
    return any(line.startswith(DATA_PREFIX) for line in body.split("\n"))


def extract_data_payload(body: str) -> str | None:
    return EventStreamParser().feed_lines(body.split("\n")).payload()


__all__ = ["DATA_PREFIX", "EventStreamParser", "extract_data_payload", "is_event_stream"]
