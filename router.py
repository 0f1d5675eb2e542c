"""Ordered path routing with first-match-wins semantics."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from request import HTTPRequest
from response import HTTPResponse

logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass(frozen=True, slots=True)
class Exact:
    path: str

    def matches(self, target: str) -> bool:
        if not self.path.startswith("/"):
            raise ValueError(f"Exact pattern must start with '/': {self.path!r}")
        return target == self.path


@dataclass(frozen=True, slots=True)
class PrefixSegment:
    """Matches ``<prefix><non-empty suffix>``, e.g. ``/echo/abc`` for ``/echo/``."""

    prefix: str

    def matches(self, target: str) -> bool:
        if not (self.prefix.startswith("/") and self.prefix.endswith("/")):
            raise ValueError(f"Prefix pattern must start and end with '/': {self.prefix!r}")
        if not target.startswith(self.prefix):
            return False
        suffix = target[len(self.prefix):]
        return bool(suffix) and not any(char.isspace() for char in suffix)


Matcher = Exact | PrefixSegment


@dataclass(frozen=True, slots=True)
class Route:
    matcher: Matcher
    handler: Handler


class Router:
    def __init__(self) -> None:
        self._routes: list[Route] = []

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def add_route(self, matcher: Matcher, handler: Handler) -> None:
        self._routes.append(Route(matcher=matcher, handler=handler))

    def resolve(self, target: str) -> Handler | None:
        for route in self._routes:
            try:
                matched = route.matcher.matches(target)
            except ValueError:
                logger.exception("Error matching %s against %r", target, route.matcher)
                continue
            if matched:
                return route.handler
        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Run the first matching handler; unroutable targets get a bare 404.

        Handler exceptions are not caught here.
        """
        handler = self.resolve(request.target)
        if handler is None:
            return HTTPResponse(status_code=404)
        return handler(request)
