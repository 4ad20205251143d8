"""pipeup: stream command output to a Pipeup dashboard in real time."""

__version__ = "0.2.0"
