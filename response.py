"""HTTP response model and serializer."""

from dataclasses import dataclass, field

from config import DEFAULT_CONTENT_TYPE, SUPPORTED_HTTP_VERSION

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        self.headers = _with_default_headers(self.headers, self.body)

    @property
    def reason_phrase(self) -> str:
        return REASON_PHRASES.get(self.status_code, "")

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        return serialize_response(self)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPResponse":
        """Parse a serialized response back into a response value."""
        head, _separator, body = raw.partition(b"\r\n\r\n")
        lines = head.decode("iso-8859-1").split("\r\n")

        status_parts = lines[0].split(" ", 2)
        if len(status_parts) < 2 or not status_parts[0].startswith("HTTP/"):
            raise ValueError("Malformed status line")
        try:
            status_code = int(status_parts[1])
        except ValueError as exc:
            raise ValueError("Malformed status code") from exc

        headers: dict[str, str] = {}
        for line in lines[1:]:
            if not line:
                continue
            if ":" not in line:
                raise ValueError("Malformed header line")
            name, value = line.split(":", 1)
            headers[name.strip()] = value.strip()

        return cls(status_code=status_code, headers=headers, body=body)


def _with_default_headers(headers: dict[str, str], body: bytes) -> dict[str, str]:
    merged = {
        "Content-Length": str(len(body)),
        "Content-Type": DEFAULT_CONTENT_TYPE,
    }
    for name, value in headers.items():
        lowered = name.lower()
        # Content-Length always tracks the body.
        if lowered == "content-length":
            continue
        for existing in [key for key in merged if key.lower() == lowered]:
            del merged[existing]
        merged[name] = value
    return merged


def serialize_response(response: HTTPResponse) -> bytes:
    header_lines = [
        f"{SUPPORTED_HTTP_VERSION} {response.status_code} {response.reason_phrase}"
    ]
    header_lines.extend(f"{key}: {value}" for key, value in response.headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1", errors="replace") + b"\r\n\r\n"
    return head + response.body
