"""Shared test fixtures for the pipeup test suite.

FakeTransport provides a test double for WebSocketTransport, allowing
headless testing of the session and streamer without a live server.
FakeClock replaces the monotonic clock so flush timing is deterministic
and every pacing sleep is recorded instead of slept.
"""

from collections.abc import Iterable

import orjson
import pytest

from pipeup.engine.errors import ConnectionClosed, ProtocolError, TransmitError
from pipeup.engine.identity import StreamIdentity
from pipeup.engine.messages import parseHandshakeReply
from pipeup.engine.session import StreamSession
from pipeup.engine.streamer import AdaptiveStreamer


class FakeTransport:
    """Test double for WebSocketTransport.

    Replies with canned handshake / end-of-stream frames and records every
    outbound payload. ``failOnSend`` makes the Nth send (1-based) fail.
    """

    def __init__(
        self,
        handshakeReply: str | None = '{"streamId": "stream-abc"}',
        endReply: str | None = '{"type": "stream_ended"}',
        failOnSend: int | None = None,
    ):
        self.handshakeReply = handshakeReply
        self.endReply = endReply
        self.failOnSend = failOnSend

        self.identities: list[StreamIdentity] = []
        self.sent: list[str] = []
        self.events: list[str] = []
        self.closeCount = 0

    async def open(self, identity: StreamIdentity) -> str:
        self.identities.append(identity)
        self.events.append("open")

        # None means the peer closed before replying
        if self.handshakeReply is None:
            raise ProtocolError("WebSocket connection closed while creating stream")

        return parseHandshakeReply(self.handshakeReply)

    async def sendMessage(self, payload: str) -> None:
        if self.failOnSend is not None and len(self.sent) + 1 == self.failOnSend:
            self.events.append("send-failed")
            raise TransmitError("Failed to send message: connection reset")

        self.sent.append(payload)
        self.events.append("send")

    async def receiveMessage(self) -> str:
        self.events.append("receive")
        if self.endReply is None:
            raise ConnectionClosed("WebSocket connection closed")

        return self.endReply

    async def close(self) -> None:
        self.closeCount += 1

    # ── Test helpers ──

    def frames(self) -> list[dict]:
        return [orjson.loads(p) for p in self.sent]

    def lineContents(self) -> list[str]:
        return [f["content"] for f in self.frames() if f["type"] == "line"]

    def endFrames(self) -> list[dict]:
        return [f for f in self.frames() if f["type"] == "end_stream"]


class FakeClock:
    """Virtual clock: time only moves when a test calls advance()."""

    def __init__(self):
        self.t = 1000.0
        self.sleeps: list[int] = []

    def now(self) -> float:
        return self.t

    def advance(self, ms: float) -> None:
        self.t += ms / 1000

    async def sleep(self, ms: int) -> None:
        self.sleeps.append(ms)


class CountingLines:
    """Async line source that records how many lines were actually pulled."""

    def __init__(self, lines: Iterable[str], clock: FakeClock | None = None, stepMs: float = 0):
        self.lines = lines
        self.clock = clock
        self.stepMs = stepMs
        self.reads = 0

    async def __aiter__(self):
        for line in self.lines:
            if self.clock and self.reads:
                self.clock.advance(self.stepMs)

            self.reads += 1
            yield line


def numbered(count: int) -> list[str]:
    return [f"line {i}" for i in range(1, count + 1)]


# ── Fixtures ──


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def identity() -> StreamIdentity:
    return StreamIdentity(name="demo")


@pytest.fixture
def make_streamer(fake_clock, identity):
    """Factory building an AdaptiveStreamer over a (possibly custom) FakeTransport."""

    def build(transport: FakeTransport | None = None, **overrides) -> AdaptiveStreamer:
        transport = transport or FakeTransport()
        params = dict(
            session=StreamSession(transport),
            identity=identity,
            clock=fake_clock,
        )
        params.update(overrides)
        return AdaptiveStreamer(**params)

    return build
