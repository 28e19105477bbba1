"""Built-in route handlers."""

import logging

from config import FILES_DIRECTORY
from request import HEAD_ENCODING, HTTPRequest
from response import HTTPResponse
from router import normalize_path
from utils import resolve_served_file

logger = logging.getLogger(__name__)


def root(request: HTTPRequest) -> HTTPResponse:
    _ = request
    return HTTPResponse(status_code=200)


def echo(request: HTTPRequest) -> HTTPResponse:
    text = normalize_path(request.path).removeprefix("/echo").removeprefix("/")
    return HTTPResponse(
        status_code=200,
        headers={"Content-Type": "text/plain"},
        body=text.encode(HEAD_ENCODING),
    )


def user_agent(request: HTTPRequest) -> HTTPResponse:
    agent = request.get_header("user-agent")
    if agent is None:
        return HTTPResponse(status_code=400, body="User agent not provided")
    return HTTPResponse(status_code=200, body=agent.encode(HEAD_ENCODING))


def serve_file(request: HTTPRequest, files_directory: str = FILES_DIRECTORY) -> HTTPResponse:
    """Serve ``/files/<name>`` from the serving directory.

    The name is percent-decoded before lookup, so a file whose name literally
    contains ``%xx`` has to be requested with the percent sign escaped as ``%25``.
    """
    name = request.path.removeprefix("/files").removeprefix("/")
    file_path = resolve_served_file(name.encode(HEAD_ENCODING), files_directory)
    if file_path is None:
        logger.info("rejected file path outside serving directory: %s", name)
        return HTTPResponse(status_code=404)

    try:
        data = file_path.read_bytes()
    except FileNotFoundError:
        return HTTPResponse(status_code=404)
    except OSError as exc:
        logger.warning("failed reading %s: %s", file_path, exc)
        return HTTPResponse(status_code=500)

    return HTTPResponse(
        status_code=200,
        headers={"Content-Type": "application/octet-stream"},
        body=data,
    )
