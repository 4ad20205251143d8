"""JSON text frames exchanged with the stream server."""

from __future__ import annotations

from typing import Any, Final

import orjson

from pipeup.engine.errors import ProtocolError, TransmitError

# Servers disagree on casing, so accept either (first match wins).
STREAM_ID_FIELDS: Final = ("streamId", "stream_id")


def encode(payload: dict[str, Any]) -> str:
    try:
        return orjson.dumps(payload).decode()
    except orjson.JSONEncodeError as e:
        # e.g. lone surrogates in a line can't be sent as UTF-8 text
        raise TransmitError(f"Failed to encode message: {e}") from e


def lineMessage(streamId: str, content: str) -> str:
    return encode({"type": "line", "stream_id": streamId, "content": content})


def endStreamMessage(streamId: str) -> str:
    return encode({"type": "end_stream", "stream_id": streamId})


def lookupStreamId(reply: dict[str, Any]) -> str | None:
    """Return the stream id from the first identifier field present in ``reply``.

    Only the first present field is consulted; if its value isn't a usable
    string we report no identifier rather than trying the next spelling.
    """
    for key in STREAM_ID_FIELDS:
        if key in reply:
            value = reply[key]
            if isinstance(value, str) and value:
                return value

            return None

    return None


def parseHandshakeReply(text: str | bytes) -> str:
    """Extract the server-assigned stream id from the handshake reply.

    Raises ProtocolError when the reply carries an ``error`` field, isn't a JSON
    object, or has neither an identifier nor an error.
    """
    try:
        reply = orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise ProtocolError(f"Unexpected response format: {text!r}") from e

    if not isinstance(reply, dict):
        raise ProtocolError(f"Unexpected response format: {text!r}")

    if (streamId := lookupStreamId(reply)) is not None:
        return streamId

    if "error" in reply:
        raise ProtocolError(f"Failed to create stream: {reply['error']}")

    raise ProtocolError(f"Unexpected response format: {text!r}")


def describeReply(raw: str | bytes) -> str:
    """Render an inbound frame for logging without ever failing."""
    if isinstance(raw, bytes):
        return f"<{len(raw):,} binary bytes>"

    return raw
