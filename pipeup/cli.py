#!/usr/bin/env python3
"""Command line entry point: pipe stdin to a Pipeup stream."""

from __future__ import annotations

import asyncio
import datetime
import os
import pathlib
import sys

import click
from loguru import logger

from pipeup import __version__
from pipeup.config import PipeupConfig, resolveConfig
from pipeup.engine.errors import PipeupError
from pipeup.engine.input import readLines
from pipeup.engine.session import StreamSession
from pipeup.engine.streamer import AdaptiveStreamer, RunStats
from pipeup.engine.transport import WebSocketTransport


def setupLogging(verbose: bool = False) -> None:
    """Log to stderr, and also to a TRACE file when PIPEUP_LOGDIR is set."""
    logger.remove()
    logger.add(sys.stderr, colorize=True, level="DEBUG" if verbose else "INFO")

    if logdir := os.getenv("PIPEUP_LOGDIR"):
        now = datetime.datetime.now()
        LOGDIR = pathlib.Path(logdir) / f"{now.year}" / f"{now.month:02}"
        LOGDIR.mkdir(exist_ok=True, parents=True)
        logfile = LOGDIR / f"pipeup-{now:%Y-%m-%dT%H-%M-%S}.log"

        # TRACE includes every line sent, which we never print to the console
        logger.add(sink=logfile, level="TRACE", colorize=False)
        logger.info("Logging session to: {}", logfile)


async def stream(config: PipeupConfig) -> RunStats:
    logger.info("Starting Pipeup CLI - Stream: {}", config.identity.name)
    if config.identity.description:
        logger.info("Description: {}", config.identity.description)

    async with WebSocketTransport(config.url, config.token) as transport:
        streamer = AdaptiveStreamer(
            session=StreamSession(transport),
            identity=config.identity,
            bufferSize=config.bufferSize,
        )

        return await streamer.run(readLines())


@click.command(name="pipeup")
@click.option("-n", "--name", help="Name for the stream [env: PIPEUP_STREAM_NAME]")
@click.option("-d", "--description", help="Description for the stream [env: PIPEUP_DESCRIPTION]")
@click.option("-t", "--token", help="API token for authentication [env: PIPEUP_TOKEN]")
@click.option("--url", help="Backend URL [env: PIPEUP_URL, default: ws://localhost:3001]")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="pipeup")
def main(
    name: str | None,
    description: str | None,
    token: str | None,
    url: str | None,
    verbose: bool,
) -> None:
    """Stream CLI output to Pipeup dashboard in real-time."""
    setupLogging(verbose)

    try:
        config = resolveConfig(name=name, description=description, token=token, url=url)
        stats = asyncio.run(stream(config))
    except PipeupError as e:
        logger.error("{}", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Interrupted, stream not ended cleanly")
        sys.exit(130)

    logger.info(
        "Stream completed successfully ({:,} lines sent in {:,} batches)",
        stats.linesSent,
        stats.flushes,
    )


if __name__ == "__main__":
    main()
