"""Configuration constants for the HTTP server."""

import tempfile

HOST: str = "0.0.0.0"
PORT: int = 4221
BUFFER_SIZE: int = 1024
FILES_DIRECTORY: str = tempfile.gettempdir()
SUPPORTED_HTTP_VERSION: str = "HTTP/1.1"
DEFAULT_CONTENT_TYPE: str = "text/plain"
MAX_CONNECTIONS: int = 128
SHUTDOWN_DRAIN_SECS: float = 1.0
ACCEPT_POLL_SECS: float = 0.2
MAX_READ_RETRIES: int = 3
REPLY_ON_PARSE_ERROR: bool = True
LOG_FORMAT: str = "plain"
LOG_LEVEL: str = "INFO"
