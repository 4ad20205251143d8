"""Start / line / end protocol driven over a transport."""
from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from pipeup.engine.errors import ConnectionClosed, ProtocolError
from pipeup.engine.messages import describeReply, endStreamMessage, lineMessage

if TYPE_CHECKING:
    from pipeup.engine.identity import StreamIdentity
    from pipeup.engine.protocols import Transport


class StreamSession:
    """Server-side stream handle for one run.

    ``streamId`` is assigned by the server during ``start()`` and set at most
    once; every line and end frame references that exact value. Until then
    the session is unopened and sending is a protocol violation.
    """

    def __init__(self, transport: Transport):
        self.transport = transport
        self.streamId: str | None = None

    @property
    def opened(self) -> bool:
        return self.streamId is not None

    def _requireStreamId(self) -> str:
        if self.streamId is None:
            raise ProtocolError("Stream not created. Call start() first")

        return self.streamId

    async def start(self, identity: StreamIdentity) -> str:
        if self.streamId is not None:
            raise ProtocolError(f"Stream already started: {self.streamId}")

        streamId = await self.transport.open(identity)
        self.streamId = streamId
        logger.info("Stream created with ID: {}", streamId)
        return streamId

    async def sendLine(self, line: str) -> None:
        streamId = self._requireStreamId()
        logger.trace("Sending line: {}", line)
        await self.transport.sendMessage(lineMessage(streamId, line))

    async def endStream(self) -> str | None:
        """Send the end frame and wait for one acknowledgement.

        Returns the acknowledgement (rendered for display), or None when the
        peer just closed the connection instead, which is also a clean end.
        """
        streamId = self._requireStreamId()
        logger.debug("Sending end_stream message")
        await self.transport.sendMessage(endStreamMessage(streamId))

        try:
            reply = await self.transport.receiveMessage()
        except ConnectionClosed:
            logger.info("WebSocket connection closed")
            reply = None
        else:
            reply = describeReply(reply)
            logger.debug("End stream response: {}", reply)

        logger.info("Stream ended successfully")
        return reply
