"""Time source for flush timing and pacing sleeps."""
from __future__ import annotations

import asyncio
import dataclasses
import time


@dataclasses.dataclass
class StreamClock:
    """Monotonic clock plus cooperative sleep.

    The streamer reads time and sleeps only through this object so tests
    can swap in a virtual clock and observe every pacing sleep.
    """

    def now(self) -> float:
        """Monotonic seconds."""
        return time.monotonic()

    async def sleep(self, ms: int) -> None:
        await asyncio.sleep(ms / 1000)
