"""HTTP request model and parser."""

from dataclasses import dataclass, field

from config import SUPPORTED_HTTP_VERSION

HEADER_BOUNDARY = b"\r\n\r\n"
HEAD_ENCODING = "iso-8859-1"


class HTTPRequestParseError(ValueError):
    """Request parse error carrying an HTTP status code."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class BadRequestError(HTTPRequestParseError):
    """Malformed request line, header line or framing header."""


class UnsupportedVersionError(HTTPRequestParseError):
    """Request line names a protocol version other than HTTP/1.1."""

    def __init__(self, version: str) -> None:
        super().__init__(f"HTTP version not supported: {version}")
        self.version = version


@dataclass(slots=True)
class HTTPRequest:
    method: str
    path: str
    http_version: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.strip().lower(), default)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse one raw request buffer into a structured request.

        The head is everything up to the first blank line; a buffer without
        one is parsed as a head with no body.
        """
        head, _separator, body = raw.partition(HEADER_BOUNDARY)
        lines = head.decode(HEAD_ENCODING).split("\r\n")
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            raise BadRequestError("Missing request line")

        method, path, http_version = _parse_request_line(lines[0])
        headers = _parse_headers(lines[1:])

        content_length = headers.get("content-length")
        if content_length is not None:
            body = body[: _parse_content_length(content_length)]

        return cls(
            method=method,
            path=path,
            http_version=http_version,
            headers=headers,
            body=body,
        )


def _parse_request_line(line: str) -> tuple[str, str, str]:
    parts = line.split()
    if len(parts) != 3:
        raise BadRequestError("Invalid request line")

    method, path, http_version = parts
    if http_version != SUPPORTED_HTTP_VERSION:
        raise UnsupportedVersionError(http_version)
    return method, path, http_version


def _parse_headers(lines: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        if ":" not in line:
            raise BadRequestError("Malformed header line")
        name, value = line.split(":", 1)
        header_name = name.strip().lower()
        if not header_name:
            raise BadRequestError("Header name cannot be empty")
        headers[header_name] = value.strip()
    return headers


def _parse_content_length(value: str) -> int:
    # ASCII digits only: no sign, whitespace or underscores.
    if not (value.isascii() and value.isdigit()):
        raise BadRequestError("Invalid Content-Length")
    return int(value)
