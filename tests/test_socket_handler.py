"""Unit tests for socket read classification and response writes."""

import errno
import socket

import pytest

from response import HTTPResponse
from socket_handler import (
    ConnectionClosedError,
    TransientReadError,
    read_request_buffer,
    write_http_response_message,
)


class FakeSocket:
    def __init__(self, outcome: bytes | BaseException = b"") -> None:
        self._outcome = outcome
        self.recv_sizes: list[int] = []
        self.sent = bytearray()

    def recv(self, size: int) -> bytes:
        self.recv_sizes.append(size)
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    def sendall(self, payload: bytes) -> None:
        self.sent.extend(payload)


def test_read_returns_buffer_with_requested_capacity() -> None:
    fake = FakeSocket(b"GET / HTTP/1.1\r\n\r\n")

    data = read_request_buffer(fake, 1024)  # type: ignore[arg-type]

    assert data == b"GET / HTTP/1.1\r\n\r\n"
    assert fake.recv_sizes == [1024]


def test_end_of_stream_is_connection_closed() -> None:
    with pytest.raises(ConnectionClosedError):
        read_request_buffer(FakeSocket(b""))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "error",
    [
        ConnectionResetError(errno.ECONNRESET, "reset"),
        BrokenPipeError(errno.EPIPE, "broken pipe"),
        OSError(errno.EBADF, "bad file descriptor"),
        OSError(errno.ENOTCONN, "not connected"),
    ],
)
def test_closed_socket_errors_are_connection_closed(error: OSError) -> None:
    with pytest.raises(ConnectionClosedError):
        read_request_buffer(FakeSocket(error))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "error",
    [
        socket.timeout("timed out"),
        OSError(errno.EIO, "input/output error"),
        InterruptedError(errno.EINTR, "interrupted"),
    ],
)
def test_other_read_errors_are_transient(error: OSError) -> None:
    with pytest.raises(TransientReadError) as exc_info:
        read_request_buffer(FakeSocket(error))  # type: ignore[arg-type]

    assert exc_info.value.__cause__ is error


def test_write_response_message_sends_serialized_bytes() -> None:
    fake = FakeSocket()
    response = HTTPResponse(status_code=200, body="hi")

    bytes_sent = write_http_response_message(fake, response)  # type: ignore[arg-type]

    assert bytes(fake.sent) == response.to_bytes()
    assert bytes_sent == len(fake.sent)
