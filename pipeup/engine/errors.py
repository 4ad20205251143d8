"""Failure taxonomy for a streaming run.

Every failure that reaches the command line is one of these. They are all
terminal: the run stops, nothing reconnects, nothing retries.
"""

from __future__ import annotations


class PipeupError(Exception):
    """Base class for all run-ending failures."""


class ConfigurationError(PipeupError):
    """Missing or invalid identity, credential, or tuning value."""


class ProtocolError(PipeupError):
    """Handshake failed, was malformed, or the session was used out of order."""


class TransmitError(PipeupError):
    """Sending a line or end-of-stream frame failed."""


class ConnectionClosed(PipeupError):
    """Peer closed the connection while we were waiting on it."""
