"""Lazy async line source over a blocking binary stream (stdin by default)."""
from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator
from typing import BinaryIO


def decodeLine(raw: bytes) -> str:
    """Strip one trailing ``\\n`` or ``\\r\\n`` and decode, replacing bad UTF-8."""
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]

    return raw.decode("utf-8", errors="replace")


async def readLines(stream: BinaryIO | None = None) -> AsyncIterator[str]:
    """Yield one decoded line per input record until EOF.

    Each blocking readline() runs in a worker thread so the event loop keeps
    servicing the websocket while we wait for input. Nothing is read ahead of
    what the consumer asks for.
    """
    if stream is None:
        stream = sys.stdin.buffer

    while raw := await asyncio.to_thread(stream.readline):
        yield decodeLine(raw)
