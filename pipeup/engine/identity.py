"""Stream identity supplied (or generated) at startup."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from pipeup.engine.errors import ConfigurationError


def generateStreamName() -> str:
    """Name used when the caller doesn't provide one, e.g. ``stream-1a2b3c4d``."""
    return f"stream-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True, slots=True)
class StreamIdentity:
    """Name and optional description announced in the connection request."""

    name: str
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Stream name must not be empty")

    @classmethod
    def create(cls, name: str | None = None, description: str | None = None) -> StreamIdentity:
        # empty strings from the environment count as "not provided"
        return cls(name=name or generateStreamName(), description=description or None)
