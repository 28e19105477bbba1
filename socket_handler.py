"""Low-level socket read/write utilities."""

from __future__ import annotations

import errno
import socket

from config import BUFFER_SIZE
from response import HTTPResponse, serialize_response

_CLOSED_ERRNOS = frozenset(
    {
        errno.EBADF,
        errno.ENOTCONN,
        errno.ECONNRESET,
        errno.ECONNABORTED,
        errno.EPIPE,
        errno.ESHUTDOWN,
    }
)


class HTTPReadError(Exception):
    """Raised when a request buffer cannot be read from the socket."""


class ConnectionClosedError(HTTPReadError):
    """Raised when the peer closed the connection or the socket is unusable."""


class TransientReadError(HTTPReadError):
    """Raised for read failures the connection loop may retry."""


def read_request_buffer(client_socket: socket.socket, buffer_size: int = BUFFER_SIZE) -> bytes:
    """Read one buffer of request bytes, assumed to hold one complete request."""
    try:
        chunk = client_socket.recv(buffer_size)
    except ConnectionError as exc:
        raise ConnectionClosedError(str(exc)) from exc
    except OSError as exc:
        if exc.errno in _CLOSED_ERRNOS:
            raise ConnectionClosedError(str(exc)) from exc
        raise TransientReadError(str(exc) or exc.__class__.__name__) from exc

    if not chunk:
        raise ConnectionClosedError("Peer closed the connection")
    return chunk


def write_http_response(client_socket: socket.socket, payload: bytes) -> None:
    """Write the complete response payload to a client socket."""
    client_socket.sendall(payload)


def write_http_response_message(client_socket: socket.socket, response: HTTPResponse) -> int:
    payload = serialize_response(response)
    write_http_response(client_socket, payload)
    return len(payload)
