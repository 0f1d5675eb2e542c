"""HTTP response model and serializer."""

from dataclasses import dataclass, field

from config import WIRE_ENCODING
from headers import Headers

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    201: "Created",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    reason_phrase: str | None = None
    headers: Headers = field(default_factory=Headers)
    body: bytes | str = b""

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode(WIRE_ENCODING)
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)
        if "content-length" in self.headers:
            raise ValueError("Content-Length is computed when the response is written")
        if self.reason_phrase is None:
            self.reason_phrase = REASON_PHRASES.get(self.status_code, "Unknown")

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status_code} {self.reason_phrase}"

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        header_lines = [self.status_line]
        header_lines.extend(f"{header.name}: {header.value}" for header in self.headers)
        header_lines.append(f"Content-Length: {len(self.body)}")
        head = "\r\n".join(header_lines).encode(WIRE_ENCODING) + b"\r\n\r\n"
        return head + self.body
