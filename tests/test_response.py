"""Unit tests for HTTP response construction and serialization."""

import pytest

from response import HTTPResponse, serialize_response


def _header_lines(raw: bytes) -> set[bytes]:
    head, _separator, _body = raw.partition(b"\r\n\r\n")
    return set(head.split(b"\r\n")[1:])


def test_response_serialization_sets_length_and_default_content_type() -> None:
    response = HTTPResponse(status_code=200, body="hello")

    raw = response.to_bytes()

    assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
    assert _header_lines(raw) == {b"Content-Length: 5", b"Content-Type: text/plain"}
    assert raw.endswith(b"\r\n\r\nhello")


def test_empty_body_carries_zero_content_length() -> None:
    raw = serialize_response(HTTPResponse(status_code=200))

    assert raw == raw.split(b"\r\n\r\n", 1)[0] + b"\r\n\r\n"
    assert b"Content-Length: 0" in _header_lines(raw)


def test_content_length_counts_bytes_not_characters() -> None:
    response = HTTPResponse(status_code=200, body="héllo")

    assert response.body == "héllo".encode("utf-8")
    assert response.headers["Content-Length"] == "6"


def test_caller_content_type_overrides_default() -> None:
    response = HTTPResponse(
        status_code=200,
        headers={"content-type": "application/octet-stream"},
        body=b"\x00\x01",
    )

    assert response.headers == {
        "Content-Length": "2",
        "content-type": "application/octet-stream",
    }


def test_caller_content_length_is_ignored() -> None:
    response = HTTPResponse(status_code=200, headers={"Content-Length": "99"}, body="abc")

    assert response.headers["Content-Length"] == "3"


def test_extra_headers_are_serialized() -> None:
    response = HTTPResponse(status_code=404, headers={"Connection": "close"})

    raw = response.to_bytes()

    assert raw.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert b"Connection: close" in _header_lines(raw)


@pytest.mark.parametrize(
    ("status_code", "status_line"),
    [
        (400, b"HTTP/1.1 400 Bad Request\r\n"),
        (500, b"HTTP/1.1 500 Internal Server Error\r\n"),
        (503, b"HTTP/1.1 503 Service Unavailable\r\n"),
    ],
)
def test_known_reason_phrases(status_code: int, status_line: bytes) -> None:
    assert HTTPResponse(status_code=status_code).to_bytes().startswith(status_line)


def test_unknown_status_has_empty_reason_phrase() -> None:
    response = HTTPResponse(status_code=299)

    assert response.reason_phrase == ""
    assert response.to_bytes().startswith(b"HTTP/1.1 299 \r\n")


def test_round_trip_recovers_status_and_framing_headers() -> None:
    original = HTTPResponse(
        status_code=200,
        headers={"Content-Type": "application/octet-stream"},
        body=b"hello",
    )

    parsed = HTTPResponse.from_bytes(original.to_bytes())

    assert parsed.status_code == 200
    assert parsed.headers["Content-Length"] == "5"
    assert parsed.headers["Content-Type"] == "application/octet-stream"
    assert parsed.body == b"hello"


def test_from_bytes_rejects_malformed_status_line() -> None:
    with pytest.raises(ValueError, match="Malformed status"):
        HTTPResponse.from_bytes(b"garbage\r\n\r\n")

    with pytest.raises(ValueError, match="Malformed status code"):
        HTTPResponse.from_bytes(b"HTTP/1.1 abc OK\r\n\r\n")
