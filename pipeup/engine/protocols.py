"""Narrow protocol for the duplex channel the engine drives.

The streamer and session only need these four calls, which lets tests
substitute an in-memory transport for the websocket one.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pipeup.engine.identity import StreamIdentity


@runtime_checkable
class Transport(Protocol):
    """One open duplex connection to the stream server."""

    async def open(self, identity: StreamIdentity) -> str: ...
    async def sendMessage(self, payload: str) -> None: ...
    async def receiveMessage(self) -> str | bytes: ...
    async def close(self) -> None: ...
