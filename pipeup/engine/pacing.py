"""Adaptive pacing: the single delay value that drives both flush cadence and backoff.

A successful flush shaves ``DELAY_STEP_MS`` off the delay (down to
``MIN_DELAY_MS``), a failed flush doubles it (up to ``MAX_DELAY_MS``).
The same delay sets the time-based flush threshold and is also how long
we sleep for rate limiting or before surfacing a failure.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final

MIN_DELAY_MS: Final = 50
MAX_DELAY_MS: Final = 2000
INITIAL_DELAY_MS: Final = 100
DELAY_STEP_MS: Final = 10

# secondary rate limit: after a successful flush, sleep once every N lines
RATE_LIMIT_EVERY: Final = 30

# soft cap on ingested lines; exceeding it ends ingestion, not the run
MAX_LINES: Final = 10_000


class Outcome(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class FlushTrigger(enum.Enum):
    """Why a flush fired."""

    FULL = "full"
    TIMER = "timer"


def clampDelay(delayMs: int) -> int:
    return max(MIN_DELAY_MS, min(MAX_DELAY_MS, delayMs))


def nextDelay(current: int, outcome: Outcome) -> int:
    """Transition the adaptive delay after a flush attempt.

    >>> nextDelay(100, Outcome.SUCCESS)
    90
    >>> nextDelay(100, Outcome.FAILURE)
    200
    >>> nextDelay(55, Outcome.SUCCESS)
    50
    >>> nextDelay(1500, Outcome.FAILURE)
    2000
    """
    if outcome is Outcome.SUCCESS:
        return max(MIN_DELAY_MS, current - DELAY_STEP_MS)

    return min(MAX_DELAY_MS, current * 2)


@dataclass(slots=True)
class PacingState:
    """Mutable pacing state owned by one streamer instance.

    ``lastFlush`` is a monotonic clock reading in seconds. ``lineCount``
    only ever grows for the lifetime of one run.
    """

    delayMs: int = INITIAL_DELAY_MS
    lastFlush: float = 0.0
    lineCount: int = 0

    def __post_init__(self) -> None:
        self.delayMs = clampDelay(self.delayMs)

    def elapsedMs(self, now: float) -> float:
        return (now - self.lastFlush) * 1000

    def trigger(self, buffered: int, bufferSize: int, now: float) -> FlushTrigger | None:
        """Decide whether the buffer should be flushed now, and why."""
        if buffered >= bufferSize:
            return FlushTrigger.FULL

        if self.elapsedMs(now) >= self.delayMs:
            return FlushTrigger.TIMER

        return None

    def record(self, outcome: Outcome, now: float) -> int:
        """Apply a flush outcome and return the new delay.

        Only a success restarts the flush timer; a failure ends the run anyway.
        """
        self.delayMs = nextDelay(self.delayMs, outcome)
        if outcome is Outcome.SUCCESS:
            self.lastFlush = now

        return self.delayMs
