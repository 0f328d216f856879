import io
import os

import pytest

from everything_mcp.mcp.errors import TransportError
from everything_mcp.mcp.reader import LineReader


class _FailingStream:
    def readline(self):
        raise OSError("stream broke")


def test_reads_lines_and_strips_delimiters():
    reader = LineReader(io.BytesIO(b'{"a":1}\r\n{"b":2}\n'))
    assert reader.read_line() == b'{"a":1}'
    assert reader.read_line() == b'{"b":2}'
    assert reader.read_line() is None


def test_skips_blank_lines():
    reader = LineReader(io.BytesIO(b"\n\r\n   \n{}\n"))
    assert reader.read_line() == b"{}"
    assert reader.read_line() is None


def test_final_line_without_newline_is_returned():
    reader = LineReader(io.BytesIO(b'{"id":1}\n{"id":2}'))
    assert reader.read_line() == b'{"id":1}'
    assert reader.read_line() == b'{"id":2}'
    assert reader.read_line() is None


def test_text_streams_are_encoded():
    reader = LineReader(io.StringIO("héllo\n"))
    assert reader.read_line() == "héllo".encode("utf-8")


def test_io_failure_is_transport_error():
    with pytest.raises(TransportError):
        LineReader(_FailingStream()).read_line()


def test_read_async_resolves_future():
    reader = LineReader(io.BytesIO(b"ping\n"))
    assert reader.read_async().result(timeout=2.0) == b"ping"
    assert reader.read_async().result(timeout=2.0) is None


def test_read_async_future_carries_transport_error():
    future = LineReader(_FailingStream()).read_async()
    with pytest.raises(TransportError):
        future.result(timeout=2.0)


def test_read_async_waits_for_pipe_data():
    read_fd, write_fd = os.pipe()
    with os.fdopen(read_fd, "rb") as rstream, os.fdopen(write_fd, "wb") as wstream:
        future = LineReader(rstream).read_async()
        assert not future.done()
        wstream.write(b"late line\n")
        wstream.flush()
        assert future.result(timeout=2.0) == b"late line"
