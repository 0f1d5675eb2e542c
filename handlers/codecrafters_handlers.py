"""Route handlers for the echo, user-agent, files and root routes."""

import logging

from config import WIRE_ENCODING
from request import HTTPRequest
from response import HTTPResponse
from store import DirectoryStore

logger = logging.getLogger(__name__)


class HandlerError(Exception):
    """Request handling failure carrying the status for a best-effort reply."""

    status_code = 500


class MissingHeaderError(HandlerError):
    status_code = 404


class MalformedTargetError(HandlerError):
    status_code = 400


class UnsupportedMethodError(HandlerError):
    status_code = 405


def _second_segment(request: HTTPRequest) -> str:
    segments = request.path_segments
    if len(segments) < 2 or not segments[1]:
        raise MalformedTargetError(f"No path segment after route prefix: {request.target}")
    return segments[1]


def echo(request: HTTPRequest) -> HTTPResponse:
    return HTTPResponse(
        status_code=200,
        headers=[("Content-Type", "text/plain")],
        body=_second_segment(request),
    )


def user_agent(request: HTTPRequest) -> HTTPResponse:
    agent = request.headers.get("user-agent")
    if agent is None:
        raise MissingHeaderError("User-Agent header not found")
    return HTTPResponse(
        status_code=200,
        headers=[("Content-Type", "text/plain")],
        body=agent,
    )


def root(request: HTTPRequest) -> HTTPResponse:
    _ = request
    return HTTPResponse(status_code=200)


def files(request: HTTPRequest, store: DirectoryStore) -> HTTPResponse:
    """GET reads and POST overwrites ``<directory>/<name>`` for ``/files/<name>``."""
    filename = _second_segment(request)
    method = request.method.upper()

    if method == "GET":
        try:
            data = store.read(filename)
        except FileNotFoundError:
            return HTTPResponse(status_code=404)
        except OSError:
            logger.error("Error reading file %s", filename)
            raise
        return HTTPResponse(
            status_code=200,
            headers=[("Content-Type", "application/octet-stream")],
            body=data,
        )

    if method == "POST":
        store.write(filename, request.body.encode(WIRE_ENCODING))
        return HTTPResponse(status_code=201)

    raise UnsupportedMethodError(f"Invalid method {request.method}")
