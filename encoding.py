"""Content-Encoding negotiation for response bodies."""

import gzip

from request import HTTPRequest
from response import HTTPResponse

SUPPORTED_ENCODING = "gzip"


def accepts_gzip(accept_encoding: str | None) -> bool:
    # Exact token match only: q-values and "*" are not interpreted.
    if accept_encoding is None:
        return False
    return any(token.strip() == SUPPORTED_ENCODING for token in accept_encoding.split(","))


def negotiate_encoding(request: HTTPRequest, response: HTTPResponse) -> bool:
    """Compress ``response`` in place when the client accepts gzip.

    Returns True when the body was replaced. Must be called once per
    response, after the handler and before serialization.
    """
    if not accepts_gzip(request.headers.get("accept-encoding")):
        return False

    response.headers.add("Content-Encoding", SUPPORTED_ENCODING)
    response.body = gzip.compress(response.body)
    return True
