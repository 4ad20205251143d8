"""pipeup engine layer: stream lines to the server with adaptive pacing.

Modules
-------
errors
    Run-ending failure taxonomy.
    - ``PipeupError`` base; ``ConfigurationError``, ``ProtocolError``,
      ``TransmitError``, ``ConnectionClosed``

identity
    - ``StreamIdentity``: immutable (name, description) announced at connect time
    - ``generateStreamName``: ``stream-xxxxxxxx`` fallback name

pacing
    Adaptive delay controller (pure, no I/O).
    - ``nextDelay``: success shrinks the delay by 10ms, failure doubles it,
      clamped to [50ms, 2000ms]
    - ``PacingState``: delay, last flush time, monotonic line counter
    - ``FlushTrigger``: buffer FULL vs flush TIMER

messages
    JSON frames: ``lineMessage``, ``endStreamMessage``, ``parseHandshakeReply``

protocols
    - ``Transport``: open / sendMessage / receiveMessage / close

transport
    - ``WebSocketTransport``: ``websockets`` implementation of ``Transport``
    - ``streamUrl``: connection URL with token, name, and description parameters

session
    - ``StreamSession``: start / sendLine / endStream over a transport

clock
    - ``StreamClock``: monotonic time and pacing sleeps (swappable in tests)

streamer
    - ``AdaptiveStreamer``: line ingestion, batching, flush pacing, soft cap
    - ``RunStats``: end-of-run counters

input
    - ``readLines``: lazy async line reader over stdin
"""

from pipeup.engine.errors import (
    ConfigurationError,
    ConnectionClosed,
    PipeupError,
    ProtocolError,
    TransmitError,
)
from pipeup.engine.identity import StreamIdentity
from pipeup.engine.session import StreamSession
from pipeup.engine.streamer import AdaptiveStreamer, RunStats
from pipeup.engine.transport import WebSocketTransport

__all__ = [
    "AdaptiveStreamer",
    "ConfigurationError",
    "ConnectionClosed",
    "PipeupError",
    "ProtocolError",
    "RunStats",
    "StreamIdentity",
    "StreamSession",
    "TransmitError",
    "WebSocketTransport",
]
