"""Tests for JSON Lines framing and record forwarding."""

import io
import os
import sys
import tracemalloc

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import requests

from logshare.extract.errors import RecordTooLargeError, SinkWriteError, StreamError
from logshare.extract.stream import iter_records, stream_records

RECORD = (
    b'{"ClientIP": "89.163.242.206","ClientRequestHost": "www.theburritobot.com",'
    b'"ClientRequestMethod": "GET","EdgeEndTimestamp": 1506702504461999900,'
    b'"EdgeResponseBytes": 69045,"EdgeResponseStatus": 200,'
    b'"EdgeStartTimestamp": 1506702504433000200,"RayID": "3a6050bcbe121a87"}'
)


class TestIterRecords:
    def test_single_chunk(self):
        assert list(iter_records([b"a\nb\nc\n"])) == [b"a", b"b", b"c"]

    def test_records_split_across_chunks(self):
        chunks = [b'{"a":', b"1}\n{", b'"b":2', b"}\n"]
        assert list(iter_records(chunks)) == [b'{"a":1}', b'{"b":2}']

    def test_one_byte_chunks(self):
        body = RECORD + b"\n" + RECORD + b"\n"
        chunks = [body[i:i + 1] for i in range(len(body))]
        assert list(iter_records(chunks)) == [RECORD, RECORD]

    def test_final_record_without_newline(self):
        assert list(iter_records([b"a\nb"])) == [b"a", b"b"]

    def test_no_trailing_empty_record(self):
        assert list(iter_records([b"a\n", b"b\n"])) == [b"a", b"b"]

    def test_blank_lines_are_records(self):
        assert list(iter_records([b"a\n\nb\n"])) == [b"a", b"", b"b"]

    def test_carriage_return_dropped(self):
        assert list(iter_records([b"a\r\nb\r", b"\n"])) == [b"a", b"b"]

    def test_empty_body(self):
        assert list(iter_records([])) == []
        assert list(iter_records([b"", b""])) == []

    def test_lazy(self):
        """Records are produced before the body has been fully read"""

        def chunks():
            yield b"first\nsecond"
            raise AssertionError("read past the first record")

        records = iter_records(chunks())
        assert next(records) == b"first"

    def test_record_too_large(self):
        with pytest.raises(RecordTooLargeError):
            list(iter_records([b"ok\n", b"x" * 20 + b"\n"], max_record_size=10))

    def test_unterminated_record_too_large(self):
        def chunks():
            while True:
                yield b"x" * 8

        with pytest.raises(RecordTooLargeError):
            list(iter_records(chunks(), max_record_size=64))

    def test_record_at_limit_accepted(self):
        assert list(iter_records([b"x" * 10 + b"\r\n"], max_record_size=10)) == [b"x" * 10]

    def test_memory_bounded_by_longest_record(self):
        """Over 20 MB of records stream through without being accumulated"""
        record = b'{"RayID": "' + b"f" * 180 + b'"}'
        per_chunk = 100
        n_chunks = 1200

        def chunks():
            for _ in range(n_chunks):
                yield (record + b"\n") * per_chunk

        class CountingSink:
            written = 0

            def write(self, data):
                self.written += len(data)

        sink = CountingSink()
        tracemalloc.start()
        try:
            count = stream_records(iter_records(chunks()), sink)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert count == per_chunk * n_chunks
        assert sink.written == count * (len(record) + 1)
        assert sink.written > 20 * 1024 * 1024
        assert peak < 2 * 1024 * 1024


class TestStreamRecords:
    def test_writes_each_record_with_newline(self):
        sink = io.BytesIO()
        count = stream_records(iter([RECORD, RECORD]), sink)
        assert count == 2
        assert sink.getvalue() == RECORD + b"\n" + RECORD + b"\n"

    def test_no_records(self):
        sink = io.BytesIO()
        assert stream_records(iter([]), sink) == 0
        assert sink.getvalue() == b""

    def test_transport_failure_mid_body(self):
        def chunks():
            yield b"a\nb\n"
            raise requests.exceptions.ChunkedEncodingError("connection broken")

        sink = io.BytesIO()
        with pytest.raises(StreamError) as exc_info:
            stream_records(iter_records(chunks()), sink)

        assert exc_info.value.count == 2
        assert isinstance(exc_info.value.cause, requests.exceptions.ChunkedEncodingError)
        assert sink.getvalue() == b"a\nb\n"

    def test_oversized_record_becomes_stream_error(self):
        sink = io.BytesIO()
        with pytest.raises(StreamError) as exc_info:
            stream_records(iter_records([b"a\n" + b"x" * 50 + b"\n"], 10), sink)

        assert exc_info.value.count == 1
        assert isinstance(exc_info.value.cause, RecordTooLargeError)

    def test_sink_failure(self):
        class BrokenSink:
            def write(self, data):
                raise SinkWriteError(self, OSError("disk full"))

        with pytest.raises(StreamError, match="disk full") as exc_info:
            stream_records(iter([b"a"]), BrokenSink())

        assert exc_info.value.count == 0
