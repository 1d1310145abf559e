"""Event-stream framing shared by the relay and the client.

The framing is a minimal textual protocol on top of ``text/event-stream``:
newline-delimited frames, each ``data: `` followed by either a JSON object
with a ``text`` field or the literal ``[DONE]`` sentinel, and a blank line
between frames::

    data: {"text": "Hel"}

    data: {"text": "lo"}

    data: [DONE]

Frame boundaries never have to line up with network reads, so the
decoder buffers partial lines and partial UTF-8 sequences across feeds.
"""

from __future__ import annotations

import codecs
import json
import logging

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DONE_EVENT = f"{DATA_PREFIX}{DONE_SENTINEL}\n\n"


def encode_text_event(text: str) -> str:
    """Frame a text delta as a single event."""
    return f"{DATA_PREFIX}{json.dumps({'text': text})}\n\n"


class StreamDecoder:
    """Incremental decoder for the relay's event stream.

    Feed it raw body bytes as they arrive; each call returns the text
    deltas completed by that chunk, in order. Once the ``[DONE]`` frame
    has been seen, ``done`` is True and further input is ignored.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> str:
        """Text received after the last complete line."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        if self._done:
            return []
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def _parse_lines(self, lines: list[str]) -> list[str]:
        texts: list[str] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX):]
            if payload == DONE_SENTINEL:
                self._done = True
                self._buffer = ""
                break
            try:
                data = json.loads(payload)
            except json.JSONDecodeError:
                logger.debug("Skipping malformed event: %r", payload[:80])
                continue
            if isinstance(data, dict) and isinstance(data.get("text"), str):
                texts.append(data["text"])
        return texts
