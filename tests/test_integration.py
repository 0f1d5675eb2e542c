"""Socket-level integration tests for connection handling and error isolation."""

import json
import logging
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from config import ServerConfig
from request import HTTPRequest
from response import HTTPResponse
from router import Exact, Router
from server import HTTPServer


def _start_server(server: HTTPServer) -> threading.Thread:
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()

    deadline = time.time() + 3
    while server.port == 0 and time.time() < deadline:
        time.sleep(0.01)

    if server.port == 0:
        raise RuntimeError("Server did not bind to a port")

    return thread


def _stop_server(server: HTTPServer, thread: threading.Thread) -> None:
    server.stop()
    thread.join(timeout=2.0)


def _send_raw(host: str, port: int, payload: bytes) -> bytes:
    with socket.create_connection((host, port), timeout=2.0) as client:
        client.sendall(payload)
        buffer = bytearray()
        while True:
            chunk = client.recv(8192)
            if not chunk:
                break
            buffer.extend(chunk)
    return bytes(buffer)


def _local_config(**overrides: object) -> ServerConfig:
    return ServerConfig(host="127.0.0.1", port=0, **overrides)


def test_concurrent_requests() -> None:
    server = HTTPServer(_local_config())
    thread = _start_server(server)

    try:
        with ThreadPoolExecutor(max_workers=20) as executor:
            futures = [
                executor.submit(
                    _send_raw, server.host, server.port, f"GET /echo/{i} HTTP/1.1\r\n\r\n".encode()
                )
                for i in range(20)
            ]
            responses = [future.result() for future in futures]
    finally:
        _stop_server(server, thread)

    assert len(responses) == 20
    for i, response in enumerate(responses):
        assert response.startswith(b"HTTP/1.1 200 OK")
        assert response.endswith(f"\r\n\r\n{i}".encode())


def test_slow_client_does_not_block_others() -> None:
    server = HTTPServer(_local_config())
    thread = _start_server(server)

    try:
        with socket.create_connection((server.host, server.port), timeout=2.0) as idle_client:
            response = _send_raw(server.host, server.port, b"GET / HTTP/1.1\r\n\r\n")
            idle_client.sendall(b"GET / HTTP/1.1\r\n\r\n")
            idle_response = idle_client.recv(1024)
    finally:
        _stop_server(server, thread)

    assert response.startswith(b"HTTP/1.1 200 OK")
    assert idle_response.startswith(b"HTTP/1.1 200 OK")


def test_malformed_request_line_closes_without_response(
    caplog: pytest.LogCaptureFixture,
) -> None:
    server = HTTPServer(_local_config())
    thread = _start_server(server)

    try:
        with caplog.at_level(logging.WARNING, logger="server"):
            response = _send_raw(server.host, server.port, b"GET /\r\n\r\n")
            follow_up = _send_raw(server.host, server.port, b"GET / HTTP/1.1\r\n\r\n")
    finally:
        _stop_server(server, thread)

    assert response == b""
    assert follow_up.startswith(b"HTTP/1.1 200 OK")
    assert "Error parsing request" in caplog.text


def test_oversized_request_closes_without_response() -> None:
    server = HTTPServer(_local_config(buffer_size=64))
    thread = _start_server(server)

    try:
        payload = b"GET /echo/" + b"a" * 100 + b" HTTP/1.1\r\n\r\n"
        with socket.create_connection((server.host, server.port), timeout=2.0) as client:
            client.sendall(payload)
            try:
                response = client.recv(1024)
            except ConnectionResetError:
                response = b""
    finally:
        _stop_server(server, thread)

    assert response == b""


def test_handler_crash_returns_500_and_server_keeps_running() -> None:
    def _boom(_request: HTTPRequest) -> HTTPResponse:
        raise OSError("disk on fire")

    def _ok(_request: HTTPRequest) -> HTTPResponse:
        return HTTPResponse(status_code=200, body="still here")

    router = Router()
    router.add_route(Exact("/boom"), _boom)
    router.add_route(Exact("/"), _ok)
    server = HTTPServer(_local_config(), router=router)
    thread = _start_server(server)

    try:
        crashed = _send_raw(server.host, server.port, b"GET /boom HTTP/1.1\r\n\r\n")
        healthy = _send_raw(server.host, server.port, b"GET / HTTP/1.1\r\n\r\n")
    finally:
        _stop_server(server, thread)

    assert crashed == b"HTTP/1.1 500 Internal Server Error\r\nContent-Length: 0\r\n\r\n"
    assert healthy.endswith(b"still here")


def test_error_responses_are_also_negotiated() -> None:
    server = HTTPServer(_local_config())
    thread = _start_server(server)

    try:
        response = _send_raw(
            server.host,
            server.port,
            b"GET /missing HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n",
        )
    finally:
        _stop_server(server, thread)

    assert response.startswith(b"HTTP/1.1 404 Not Found\r\nContent-Encoding: gzip\r\n")


def test_json_request_log(caplog: pytest.LogCaptureFixture) -> None:
    server = HTTPServer(_local_config(log_format="json"))
    thread = _start_server(server)

    try:
        with caplog.at_level(logging.INFO, logger="server"):
            _send_raw(server.host, server.port, b"GET /echo/hi HTTP/1.1\r\n\r\n")
            deadline = time.time() + 2
            while not any('"status"' in record.getMessage() for record in caplog.records):
                if time.time() > deadline:
                    break
                time.sleep(0.01)
    finally:
        _stop_server(server, thread)

    events = [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.getMessage().startswith("{")
    ]
    assert events
    assert events[0]["path"] == "/echo/hi"
    assert events[0]["status"] == 200
    assert events[0]["gzip"] is False
