"""Immutable prefix routing table for path handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from request import HTTPRequest
from response import HTTPResponse

logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


def normalize_path(path: str) -> str:
    """Drop one trailing slash, keeping the root path as ``/``."""
    return path.removesuffix("/") or "/"


@dataclass(frozen=True, slots=True)
class Route:
    prefix: str
    handler: Handler
    exact: bool = False

    def matches(self, path: str) -> bool:
        if self.exact or self.prefix == "/":
            return path == self.prefix
        return path == self.prefix or path.startswith(self.prefix + "/")


class Router:
    def __init__(self, routes: Iterable[Route] = ()) -> None:
        normalized: list[Route] = []
        for route in routes:
            if not route.prefix.startswith("/"):
                raise ValueError("path must start with '/'")
            normalized.append(Route(normalize_path(route.prefix), route.handler, route.exact))
        self._routes: tuple[Route, ...] = tuple(normalized)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    def with_route(self, prefix: str, handler: Handler, *, exact: bool = False) -> Router:
        """Return a new router with one more route appended."""
        return Router((*self._routes, Route(prefix, handler, exact)))

    def resolve(self, path: str) -> Handler | None:
        normalized_path = normalize_path(path)
        for route in self._routes:
            if route.matches(normalized_path):
                return route.handler
        return None

    def route_exists(self, path: str) -> bool:
        return self.resolve(path) is not None

    def route(self, request: HTTPRequest) -> HTTPResponse:
        """Map a parsed request to exactly one response."""
        handler = self.resolve(request.path)
        if handler is None:
            logger.info("route not found: %s", request.path)
            return HTTPResponse(status_code=404)

        try:
            return handler(request)
        except Exception:
            logger.exception("Unhandled error in route handler for %s", request.path)
            return HTTPResponse(status_code=500)
