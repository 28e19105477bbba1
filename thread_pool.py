"""One thread per accepted connection, capped at a fixed number of open connections."""

from __future__ import annotations

import logging
import socket
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

ClientAddress = tuple[str, int]
ConnectionHandler = Callable[[socket.socket, ClientAddress], None]


class ConnectionThreadPool:
    """Runs each connection on its own daemon thread while a slot is free.

    ``submit`` never queues: a connection either gets a thread immediately or
    is refused, so one idle client cannot hold up another.
    """

    def __init__(self, max_connections: int, handler: ConnectionHandler) -> None:
        if max_connections <= 0:
            raise ValueError("max_connections must be positive")

        self._handler = handler
        self._max_connections = max_connections
        self._connections: dict[socket.socket, threading.Thread] = {}
        self._condition = threading.Condition(threading.Lock())
        self._closed = False
        self._next_id = 0

    @property
    def max_connections(self) -> int:
        return self._max_connections

    @property
    def open_connections(self) -> int:
        with self._condition:
            return len(self._connections)

    def submit(self, client_socket: socket.socket, address: ClientAddress) -> bool:
        """Start a thread for the connection; False when closed or at capacity."""
        with self._condition:
            if self._closed or len(self._connections) >= self._max_connections:
                return False
            thread = threading.Thread(
                target=self._run,
                args=(client_socket, address),
                name=f"http-conn-{self._next_id}",
                daemon=True,
            )
            self._next_id += 1
            self._connections[client_socket] = thread
        try:
            thread.start()
        except RuntimeError:
            logger.warning("could not start connection thread for %s", address[0])
            with self._condition:
                self._connections.pop(client_socket, None)
                self._condition.notify_all()
            return False
        return True

    def wait_for_drain(self, timeout: float | None = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._condition:
            while self._connections:
                if deadline is None:
                    self._condition.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._condition.wait(timeout=remaining)
            return True

    def shutdown(self, *, drain_timeout: float = 0.0) -> None:
        """Refuse new connections, wait up to drain_timeout, then cut the rest off.

        Remaining sockets are shut down for reading and writing, which ends
        their pending reads with end-of-stream.
        """
        with self._condition:
            if self._closed:
                return
            self._closed = True

        if not self.wait_for_drain(timeout=drain_timeout):
            with self._condition:
                remaining = list(self._connections.items())
            logger.info("closing %s connections still open at shutdown", len(remaining))
            for client_socket, _thread in remaining:
                try:
                    client_socket.shutdown(socket.SHUT_RDWR)
                except OSError:
                    # Already closed by its handler.
                    continue
            for _client_socket, thread in remaining:
                thread.join(timeout=1.0)

    def _run(self, client_socket: socket.socket, address: ClientAddress) -> None:
        try:
            self._handler(client_socket, address)
        finally:
            with self._condition:
                self._connections.pop(client_socket, None)
                self._condition.notify_all()
