"""Adaptive batching and flow control for forwarding input lines."""

from __future__ import annotations

from collections.abc import AsyncIterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from pipeup.engine.clock import StreamClock
from pipeup.engine.errors import ConfigurationError, PipeupError
from pipeup.engine.pacing import (
    MAX_LINES,
    RATE_LIMIT_EVERY,
    FlushTrigger,
    Outcome,
    PacingState,
)

if TYPE_CHECKING:
    from pipeup.engine.identity import StreamIdentity
    from pipeup.engine.session import StreamSession

DEFAULT_BUFFER_SIZE = 10

# how often (in lines) to report progress on long streams
PROGRESS_EVERY = 100


@dataclass(slots=True)
class RunStats:
    """Counters reported at the end of a run (and useful when one fails)."""

    linesSent: int = 0
    flushes: int = 0
    fullFlushes: int = 0
    timerFlushes: int = 0
    sleeps: int = 0
    capped: bool = False


@dataclass(slots=True)
class AdaptiveStreamer:
    """Read lines, batch them, and forward them through a stream session.

    A batch is flushed once the buffer reaches ``bufferSize`` lines or the
    adaptive delay has passed since the last successful flush. Successful
    flushes speed the cadence up; the first failure doubles the delay,
    sleeps for it, and ends the run.

    All state here belongs to this instance and is only touched from the
    task running ``run()``.
    """

    session: StreamSession
    identity: StreamIdentity
    bufferSize: int = DEFAULT_BUFFER_SIZE
    maxLines: int = MAX_LINES
    rateLimitEvery: int = RATE_LIMIT_EVERY
    clock: StreamClock = field(default_factory=StreamClock)
    pacing: PacingState = field(default_factory=PacingState)
    buffer: list[str] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)

    def __post_init__(self) -> None:
        if self.bufferSize < 1:
            raise ConfigurationError(f"Buffer size must be positive, got {self.bufferSize}")

    @property
    def lineCount(self) -> int:
        return self.pacing.lineCount

    @property
    def delayMs(self) -> int:
        return self.pacing.delayMs

    async def run(self, lines: AsyncIterable[str]) -> RunStats:
        """Stream every line from ``lines`` and close the stream.

        ``lines`` is consumed lazily and never past the soft cap. Any
        PipeupError ends the run and propagates to the caller.
        """
        logger.info("Starting stdin processing for stream: {}", self.identity.name)
        await self.session.start(self.identity)

        self.pacing.lastFlush = self.clock.now()

        async for line in lines:
            self.pacing.lineCount += 1
            logger.debug("Processing line {}: {}", self.lineCount, line[:50])

            self.buffer.append(line)

            if trigger := self.pacing.trigger(len(self.buffer), self.bufferSize, self.clock.now()):
                await self.flushPaced(trigger)

                # secondary rate limit, independent of flush cadence
                if self.lineCount % self.rateLimitEvery == 0:
                    await self.sleep()

            if self.lineCount % PROGRESS_EVERY == 0:
                logger.info("Processed {:,} lines (delay: {}ms)", self.lineCount, self.delayMs)

            # protect the server from never-ending input
            if self.lineCount > self.maxLines:
                logger.warning(
                    "Reached maximum line limit ({:,}). Stopping stream.", self.maxLines
                )
                self.stats.capped = True
                break

        # drain whatever is left; a failure here is fatal but not backed off
        await self.flush()

        await self.session.endStream()

        logger.info("Completed processing {:,} lines", self.lineCount)
        return self.stats

    async def flushPaced(self, trigger: FlushTrigger) -> None:
        """Flush and fold the outcome into the adaptive delay.

        On failure the delay is doubled, we sleep for it, then re-raise.
        """
        try:
            await self.flush(trigger)
        except PipeupError as e:
            delay = self.pacing.record(Outcome.FAILURE, self.clock.now())
            logger.warning("Send batch failed, increasing delay to {}ms: {}", delay, e)
            await self.sleep()
            raise

        self.pacing.record(Outcome.SUCCESS, self.clock.now())

    async def flush(self, trigger: FlushTrigger | None = None) -> None:
        """Send every buffered line, in order, one message per line.

        The buffer is only cleared once the whole batch went out. The first
        failing send aborts the batch and the remaining lines stay buffered.
        """
        if not self.buffer:
            return

        logger.debug("Sending batch of {} lines", len(self.buffer))

        for line in self.buffer:
            try:
                await self.session.sendLine(line)
            except PipeupError as e:
                logger.error("Failed to send line: {}", e)
                raise

            self.stats.linesSent += 1

        self.buffer.clear()

        self.stats.flushes += 1
        if trigger is FlushTrigger.FULL:
            self.stats.fullFlushes += 1
        elif trigger is FlushTrigger.TIMER:
            self.stats.timerFlushes += 1

    async def sleep(self) -> None:
        self.stats.sleeps += 1
        await self.clock.sleep(self.delayMs)
