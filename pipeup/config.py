"""Run configuration: command line > environment > .env.pipeup > defaults."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from dotenv import dotenv_values

from pipeup.engine.errors import ConfigurationError
from pipeup.engine.identity import StreamIdentity
from pipeup.engine.streamer import DEFAULT_BUFFER_SIZE

ENV_FILE: Final = ".env.pipeup"

PIPEUP_DEFAULT: Final = dict(
    PIPEUP_URL="ws://localhost:3001",
    PIPEUP_BUFFER_SIZE=str(DEFAULT_BUFFER_SIZE),
)


def loadEnvironment(envFile: str = ENV_FILE) -> dict[str, str | None]:
    """Merge defaults, the optional env file, and the process environment (last wins)."""
    return {**PIPEUP_DEFAULT, **dotenv_values(envFile), **os.environ}


@dataclass(slots=True)
class PipeupConfig:
    token: str
    identity: StreamIdentity
    url: str = PIPEUP_DEFAULT["PIPEUP_URL"]
    bufferSize: int = DEFAULT_BUFFER_SIZE


def resolveConfig(
    *,
    name: str | None = None,
    description: str | None = None,
    token: str | None = None,
    url: str | None = None,
    env: Mapping[str, str | None] | None = None,
) -> PipeupConfig:
    """Combine explicit values with the environment mapping into a PipeupConfig.

    Raises ConfigurationError if no token is available anywhere or the
    buffer size isn't a positive integer. A missing stream name is generated.
    """
    if env is None:
        env = loadEnvironment()

    token = token or env.get("PIPEUP_TOKEN")
    if not token:
        raise ConfigurationError(
            "API token is required. Set PIPEUP_TOKEN environment variable or use --token"
        )

    identity = StreamIdentity.create(
        name=name or env.get("PIPEUP_STREAM_NAME"),
        description=description or env.get("PIPEUP_DESCRIPTION"),
    )

    rawSize = env.get("PIPEUP_BUFFER_SIZE") or PIPEUP_DEFAULT["PIPEUP_BUFFER_SIZE"]
    try:
        bufferSize = int(rawSize)
    except ValueError as e:
        raise ConfigurationError(f"PIPEUP_BUFFER_SIZE must be an integer, got {rawSize!r}") from e

    if bufferSize < 1:
        raise ConfigurationError(f"PIPEUP_BUFFER_SIZE must be positive, got {bufferSize}")

    return PipeupConfig(
        token=token,
        identity=identity,
        url=url or env.get("PIPEUP_URL") or PIPEUP_DEFAULT["PIPEUP_URL"],
        bufferSize=bufferSize,
    )
