"""WebSocket transport for the stream server."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

import websockets
from loguru import logger

from pipeup.engine.errors import ConnectionClosed, ProtocolError, TransmitError
from pipeup.engine.identity import StreamIdentity
from pipeup.engine.messages import parseHandshakeReply

STREAM_PATH = "/api/stream/ws"


def streamUrl(base: str, token: str, identity: StreamIdentity) -> str:
    """Build the connection URL carrying the credential and stream parameters.

    The server creates the stream from these query parameters alone, so the
    connection request *is* the start request.
    """
    params = {"token": token, "name": identity.name}
    if identity.description:
        params["description"] = identity.description

    return f"{base.rstrip('/')}{STREAM_PATH}?{urlencode(params, quote_via=quote)}"


@dataclass(slots=True)
class WebSocketTransport:
    """Owns one websocket connection for the lifetime of a run."""

    url: str
    token: str

    # None means "wait as long as the network stack does"
    openTimeout: float | None = 10

    # active websocket connection (if any)
    activeWS: Any | None = None

    async def open(self, identity: StreamIdentity) -> str:
        """Connect and wait for the single reply assigning our stream id."""
        logger.info("Connecting to: {}", self.url)
        logger.debug(
            "Final WebSocket URL: {}", streamUrl(self.url, "<redacted>", identity)
        )

        try:
            self.activeWS = await websockets.connect(
                streamUrl(self.url, self.token, identity),
                open_timeout=self.openTimeout,
                close_timeout=1,
                # lines can be arbitrarily long
                max_size=None,
            )
        except (OSError, asyncio.TimeoutError, TimeoutError, websockets.WebSocketException) as e:
            raise ProtocolError(f"Failed to connect to WebSocket: {e}") from e

        logger.info("WebSocket connection established")
        logger.debug("Waiting for stream creation confirmation from backend...")

        try:
            reply = await self.receiveMessage()
        except ConnectionClosed as e:
            raise ProtocolError("WebSocket connection closed while creating stream") from e

        if isinstance(reply, bytes):
            raise ProtocolError("Unexpected message type while creating stream")

        logger.debug("Received response: {}", reply)
        return parseHandshakeReply(reply)

    async def sendMessage(self, payload: str) -> None:
        if self.activeWS is None:
            raise TransmitError("WebSocket is not connected")

        try:
            await self.activeWS.send(payload)
        except (OSError, websockets.ConnectionClosed) as e:
            raise TransmitError(f"Failed to send message: {e}") from e

    async def receiveMessage(self) -> str | bytes:
        if self.activeWS is None:
            raise ConnectionClosed("WebSocket is not connected")

        try:
            return await self.activeWS.recv()
        except websockets.ConnectionClosed as e:
            raise ConnectionClosed(f"WebSocket connection closed: {e}") from e

    async def close(self) -> None:
        if (ws := self.activeWS) is None:
            return

        self.activeWS = None
        await ws.close()

    async def __aenter__(self) -> WebSocketTransport:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
