"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket
from typing import Protocol

from config import BUFFER_SIZE
from response import HTTPResponse


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""


class OversizedRequestError(HTTPReadError):
    """Raised when a single read fills the whole receive buffer."""


class RequestReader(Protocol):
    def read(self, client_socket: socket.socket) -> bytes: ...


class BoundedRequestReader:
    """Reads a request with exactly one fixed-capacity recv call.

    There is no accumulation loop: a request that fills the buffer may have
    been truncated, so it is rejected instead of parsed.
    """

    def __init__(self, buffer_size: int = BUFFER_SIZE) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.buffer_size = buffer_size

    def read(self, client_socket: socket.socket) -> bytes:
        data = client_socket.recv(self.buffer_size)
        if len(data) >= self.buffer_size:
            raise OversizedRequestError(
                f"Request filled the {self.buffer_size} byte read buffer"
            )
        return data


def write_http_response_message(client_socket: socket.socket, response: HTTPResponse) -> int:
    """Write an HTTPResponse to the client and return the number of bytes sent."""
    payload = response.to_bytes()
    client_socket.sendall(payload)
    return len(payload)
