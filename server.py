"""Main HTTP server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import functools
import json
import logging
import socket
import time

from config import (
    ACCEPT_POLL_SECS,
    BUFFER_SIZE,
    FILES_DIRECTORY,
    HOST,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_CONNECTIONS,
    MAX_READ_RETRIES,
    PORT,
    REPLY_ON_PARSE_ERROR,
    SHUTDOWN_DRAIN_SECS,
)
from handlers.builtin_handlers import echo, root, serve_file, user_agent
from metrics import MetricsRegistry
from request import HTTPRequest, HTTPRequestParseError
from response import REASON_PHRASES, HTTPResponse
from router import Route, Router
from socket_handler import (
    ConnectionClosedError,
    TransientReadError,
    read_request_buffer,
    write_http_response_message,
)
from thread_pool import ConnectionThreadPool

logger = logging.getLogger(__name__)


class HTTPServer:
    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        router: Router | None = None,
        max_connections: int = MAX_CONNECTIONS,
        *,
        files_directory: str = FILES_DIRECTORY,
        buffer_size: int = BUFFER_SIZE,
        reply_on_parse_error: bool = REPLY_ON_PARSE_ERROR,
        max_read_retries: int | None = MAX_READ_RETRIES,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.host = host
        self.port = port
        self.files_directory = files_directory
        self.router = router or self._build_default_router()
        self.max_connections = max_connections
        self.buffer_size = buffer_size
        self.reply_on_parse_error = reply_on_parse_error
        self.max_read_retries = max_read_retries
        self.log_format = log_format

        self._server_socket: socket.socket | None = None
        self._pool: ConnectionThreadPool | None = None
        self._running = False
        self.metrics = MetricsRegistry()

    def _build_default_router(self) -> Router:
        return Router(
            (
                Route("/echo", echo),
                Route("/user-agent", user_agent),
                Route("/files", functools.partial(serve_file, files_directory=self.files_directory)),
                Route("/", root, exact=True),
            )
        )

    def start(self) -> None:
        """Bind, listen and run the accept loop until stop() is called."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(128)
            server_socket.settimeout(ACCEPT_POLL_SECS)
            pool = ConnectionThreadPool(
                max_connections=self.max_connections,
                handler=self._handle_client,
            )
            self._pool = pool
            self.port = server_socket.getsockname()[1]

            self._running = True
            logger.info(
                "listening on %s:%s, serving files from %s",
                self.host,
                self.port,
                self.files_directory,
            )
            try:
                while self._running:
                    try:
                        client_socket, address = server_socket.accept()
                    except socket.timeout:
                        continue
                    except OSError as exc:
                        if not self._running:
                            break
                        logger.warning("error accepting connection: %s", exc)
                        continue

                    if not pool.submit(client_socket, address):
                        self._send_capacity_response(client_socket, address)
            finally:
                self._shutdown_pool()

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None
        self._shutdown_pool()

    def _shutdown_pool(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(drain_timeout=SHUTDOWN_DRAIN_SECS)

    def _send_capacity_response(
        self, client_socket: socket.socket, address: tuple[str, int]
    ) -> None:
        with client_socket:
            started_at = time.perf_counter()
            response = HTTPResponse(
                status_code=503,
                headers={"Connection": "close"},
                body="Service Unavailable",
            )
            try:
                bytes_sent = write_http_response_message(client_socket, response)
            except OSError as exc:
                self.metrics.record_write_error(exc.__class__.__name__)
                return
            self._record_and_log(
                address=address,
                method="-",
                path="-",
                response=response,
                payload_size=bytes_sent,
                bytes_in=0,
                started_at=started_at,
            )

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            self.metrics.connection_opened()
            try:
                self._serve_connection(client_socket, address)
            except Exception:
                logger.exception("Unhandled error on connection from %s", address[0])
            finally:
                self.metrics.connection_closed()

    def _serve_connection(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        """Read, parse, dispatch and write until the peer closes the connection."""
        failed_reads = 0
        while True:
            try:
                raw_request = read_request_buffer(client_socket, self.buffer_size)
            except ConnectionClosedError as exc:
                logger.debug("connection from %s closed: %s", address[0], exc)
                return
            except TransientReadError as exc:
                cause = exc.__cause__ or exc
                self.metrics.record_read_error(cause.__class__.__name__)
                failed_reads += 1
                logger.warning("failed reading bytes from %s: %s", address[0], exc)
                if self.max_read_retries is not None and failed_reads > self.max_read_retries:
                    logger.warning(
                        "giving up on %s after %s failed reads", address[0], failed_reads
                    )
                    return
                continue

            failed_reads = 0
            started_at = time.perf_counter()
            method, path = "-", "-"
            try:
                request = HTTPRequest.from_bytes(raw_request)
            except HTTPRequestParseError as exc:
                self.metrics.record_parse_error(exc.__class__.__name__)
                logger.warning("parsing request from %s: %s", address[0], exc)
                if not self.reply_on_parse_error:
                    continue
                response = HTTPResponse(
                    status_code=exc.status_code,
                    body=REASON_PHRASES.get(exc.status_code, "Bad Request"),
                )
            else:
                method, path = request.method, request.path
                response = self.router.route(request)

            try:
                bytes_sent = write_http_response_message(client_socket, response)
            except OSError as exc:
                self.metrics.record_write_error(exc.__class__.__name__)
                logger.warning("failed writing response to %s: %s", address[0], exc)
                return

            self._record_and_log(
                address=address,
                method=method,
                path=path,
                response=response,
                payload_size=bytes_sent,
                bytes_in=len(raw_request),
                started_at=started_at,
            )

    def _record_and_log(
        self,
        *,
        address: tuple[str, int],
        method: str,
        path: str,
        response: HTTPResponse,
        payload_size: int,
        bytes_in: int,
        started_at: float,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        self.metrics.record_request(
            status_code=response.status_code,
            duration_ms=duration_ms,
            bytes_sent=payload_size,
        )
        event = {
            "client": address[0],
            "method": method,
            "path": path,
            "status": response.status_code,
            "bytes_in": bytes_in,
            "bytes_out": payload_size,
            "latency_ms": round(duration_ms, 3),
        }
        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            "client=%s method=%s path=%s status=%s bytes_in=%s bytes_out=%s duration_ms=%.2f",
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_in"],
            event["bytes_out"],
            duration_ms,
        )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run minimal HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=FILES_DIRECTORY,
        help="Directory to serve files from under /files/",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL)
    server = HTTPServer(files_directory=args.directory)
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()


if __name__ == "__main__":
    main()
