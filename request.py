"""HTTP request model and parser."""

from dataclasses import dataclass, field

from config import WIRE_ENCODING
from headers import Headers


class HTTPRequestParseError(ValueError):
    """Raised when request bytes cannot be parsed into an HTTPRequest."""


class MalformedRequestLineError(HTTPRequestParseError):
    """Raised when the request line does not have exactly three tokens."""


class MalformedHeaderError(HTTPRequestParseError):
    """Raised when a header line has no ': ' delimiter."""


@dataclass(frozen=True, slots=True)
class HTTPRequest:
    method: str
    target: str
    http_version: str
    headers: Headers = field(default_factory=Headers)
    body: str = ""

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse one buffered HTTP/1.1 message.

        Headers end at the first blank line and the single line after it is
        the body. There is no Content-Length driven read of the body.
        """
        lines = raw.decode(WIRE_ENCODING).split("\n")

        request_line = lines[0].split()
        if len(request_line) != 3:
            raise MalformedRequestLineError(
                f"Expected 3 parts in request line, got {request_line!r}"
            )
        method, target, http_version = request_line

        headers = Headers()
        index = 1
        while index < len(lines):
            line = lines[index].strip()
            index += 1
            if not line:
                break
            name, sep, value = line.partition(": ")
            if not sep:
                raise MalformedHeaderError(f"Malformed header line: {line!r}")
            headers.add(name.lower(), value)

        body = lines[index] if index < len(lines) else ""

        return cls(
            method=method,
            target=target,
            http_version=http_version,
            headers=headers,
            body=body,
        )

    @property
    def path_segments(self) -> list[str]:
        return self.target[1:].split("/")
