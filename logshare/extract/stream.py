"""
JSON Lines Streaming

Framing and forwarding of a newline-delimited response body. Records are
opaque byte strings: they are never decoded or parsed. Memory use is bounded
by the chunk size plus the longest single record.
"""

from typing import Iterable, Iterator
import logging

from .config import DEFAULT_MAX_RECORD_SIZE
from .errors import RecordTooLargeError, StreamError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
NEWLINE = b"\n"


def _finish(record: bytes, max_record_size: int) -> bytes:
    if record.endswith(b"\r"):
        record = record[:-1]
    if len(record) > max_record_size:
        raise RecordTooLargeError(
            f"record of {len(record)} bytes exceeds the {max_record_size} byte limit"
        )
    return record


def iter_records(
    chunks: Iterable[bytes], max_record_size: int = DEFAULT_MAX_RECORD_SIZE
) -> Iterator[bytes]:
    """
    Lazily split a stream of byte chunks into records

    Each record is the bytes before a newline, with a trailing carriage
    return dropped. Blank lines are records. A final record without a
    terminating newline is still yielded. Single pass, not restartable.

    Args:
        chunks: Body chunks in arrival order (e.g. response.iter_content())
        max_record_size: Longest record accepted, in bytes

    Raises:
        RecordTooLargeError: When a record outgrows max_record_size
    """
    pending = bytearray()

    for chunk in chunks:
        if not chunk:
            continue

        pos = 0
        while True:
            idx = chunk.find(NEWLINE, pos)
            if idx < 0:
                break
            if pending:
                pending += chunk[pos:idx]
                record = bytes(pending)
                pending.clear()
            else:
                record = chunk[pos:idx]
            yield _finish(record, max_record_size)
            pos = idx + 1

        pending += chunk[pos:]
        # +1 leaves room for a trailing \r that will be dropped
        if len(pending) > max_record_size + 1:
            raise RecordTooLargeError(
                f"record exceeds the {max_record_size} byte limit"
            )

    if pending:
        yield _finish(bytes(pending), max_record_size)


def stream_records(records: Iterable[bytes], sink) -> int:
    """
    Write every record plus a newline to `sink`, counting them

    Args:
        records: Record iterator, typically from iter_records()
        sink: Object with a write(bytes) method

    Returns:
        int: Number of records written

    Raises:
        StreamError: When framing, the transport, or the sink fails. The
            error's `count` holds the records written before the failure.
    """
    count = 0
    try:
        for record in records:
            sink.write(record + NEWLINE)
            count += 1
    except (OSError, RecordTooLargeError) as e:
        # requests' exceptions derive from IOError, so a broken body lands here
        logger.debug(f"Streaming stopped after {count} records: {e}")
        raise StreamError(f"failed to stream logs: {e}", cause=e, count=count) from e

    return count
