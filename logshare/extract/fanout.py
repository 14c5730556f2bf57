"""
Fan-out Sink

A sink is anything with a write(bytes) method: a binary file, stdout's
buffer, a cloud object writer. FanOutSink composes several into the single
destination the streamer writes to.
"""

import sys
from typing import BinaryIO, Iterable, List
import logging

from .errors import SinkWriteError

logger = logging.getLogger(__name__)


class FanOutSink:
    """Forward each write to every sink, in order.

    The first sink to fail aborts the write with SinkWriteError; sinks after
    it do not receive that record.
    """

    def __init__(self, sinks: Iterable):
        self.sinks: List = list(sinks)
        for sink in self.sinks:
            if not callable(getattr(sink, "write", None)):
                raise TypeError(f"sink {sink!r} has no write() method")

    def write(self, data: bytes) -> int:
        for sink in self.sinks:
            try:
                sink.write(data)
            except Exception as e:
                raise SinkWriteError(sink, e) from e
        return len(data)

    def flush(self):
        for sink in self.sinks:
            flush = getattr(sink, "flush", None)
            if flush is None:
                continue
            try:
                flush()
            except Exception as e:
                raise SinkWriteError(sink, e) from e

    def close(self, raise_errors: bool = True):
        """
        Close every sink that can be closed

        Stdout is left open. Every sink is attempted even when one fails.

        Args:
            raise_errors: Re-raise the first close failure once all sinks
                were attempted; when False failures are only logged
        """
        first_error = None
        for sink in self.sinks:
            close = getattr(sink, "close", None)
            if close is None or _is_stdout(sink):
                continue
            try:
                close()
            except Exception as e:
                logger.error(f"Error closing sink {sink!r}: {e}")
                if first_error is None:
                    first_error = e
        if raise_errors and first_error is not None:
            raise first_error

    def __repr__(self):
        return f"FanOutSink({self.sinks!r})"


def _is_stdout(sink) -> bool:
    return any(
        sink is getattr(stream, "buffer", None) for stream in (sys.stdout, sys.__stdout__)
    )


def stdout_sink() -> BinaryIO:
    """Standard output as a binary sink"""
    return sys.stdout.buffer
