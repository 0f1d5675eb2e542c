"""Main HTTP server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import functools
import json
import logging
import socket
import threading
import time

from config import (
    ACCEPT_TIMEOUT_SECS,
    BUFFER_SIZE,
    FILES_DIRECTORY,
    HOST,
    LOG_FORMAT,
    LOG_LEVEL,
    PORT,
    ServerConfig,
)
from encoding import negotiate_encoding
from handlers.codecrafters_handlers import HandlerError, echo, files, root, user_agent
from request import HTTPRequest, HTTPRequestParseError
from response import HTTPResponse
from router import Exact, PrefixSegment, Router
from socket_handler import (
    BoundedRequestReader,
    HTTPReadError,
    RequestReader,
    write_http_response_message,
)
from store import DirectoryStore

logger = logging.getLogger(__name__)


def build_default_router(config: ServerConfig) -> Router:
    store = DirectoryStore(config.files_directory)
    router = Router()
    router.add_route(PrefixSegment("/files/"), functools.partial(files, store=store))
    router.add_route(PrefixSegment("/echo/"), echo)
    router.add_route(Exact("/user-agent"), user_agent)
    router.add_route(Exact("/"), root)
    return router


class HTTPServer:
    def __init__(
        self,
        config: ServerConfig | None = None,
        router: Router | None = None,
        reader: RequestReader | None = None,
    ) -> None:
        self.config = config or ServerConfig()
        self.host = self.config.host
        self.port = self.config.port
        self.router = router or build_default_router(self.config)
        self.reader = reader or BoundedRequestReader(self.config.buffer_size)

        self._server_socket: socket.socket | None = None
        self._running = False

    def start(self) -> None:
        """Listen and hand each accepted connection to its own thread."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(128)
            server_socket.settimeout(ACCEPT_TIMEOUT_SECS)
            self.port = server_socket.getsockname()[1]
            logger.info("Listening on %s:%s, serving files from %s",
                        self.host, self.port, self.config.files_directory)

            self._running = True
            while self._running:
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break

                client_socket.settimeout(None)
                worker = threading.Thread(
                    target=self._handle_client,
                    args=(client_socket, address),
                    name=f"http-conn-{address[1]}",
                    daemon=True,
                )
                worker.start()

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            started_at = time.perf_counter()
            try:
                raw_request = self.reader.read(client_socket)
            except HTTPReadError as exc:
                logger.warning("Error reading request from %s: %s", address[0], exc)
                return
            except OSError as exc:
                logger.warning("Socket error reading from %s: %s", address[0], exc)
                return

            if not raw_request:
                return

            try:
                request = HTTPRequest.from_bytes(raw_request)
            except HTTPRequestParseError as exc:
                logger.warning("Error parsing request from %s: %s", address[0], exc)
                return

            logger.debug("handling request: %s %s", request.method, request.target)
            response = self._dispatch(request)
            compressed = negotiate_encoding(request, response)

            try:
                bytes_sent = write_http_response_message(client_socket, response)
            except OSError as exc:
                logger.warning("Error writing response to %s: %s", address[0], exc)
                return

            self._record_and_log(
                address=address,
                request=request,
                response=response,
                bytes_in=len(raw_request),
                bytes_out=bytes_sent,
                started_at=started_at,
                compressed=compressed,
            )

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return self.router.dispatch(request)
        except HandlerError as exc:
            logger.warning("Error handling %s %s: %s", request.method, request.target, exc)
            return HTTPResponse(status_code=exc.status_code)
        except Exception:
            logger.exception("Unhandled error in route handler")
            return HTTPResponse(status_code=500)

    def _record_and_log(
        self,
        *,
        address: tuple[str, int],
        request: HTTPRequest,
        response: HTTPResponse,
        bytes_in: int,
        bytes_out: int,
        started_at: float,
        compressed: bool,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": request.method,
            "path": request.target,
            "status": response.status_code,
            "bytes_in": bytes_in,
            "bytes_out": bytes_out,
            "latency_ms": round(duration_ms, 3),
            "gzip": compressed,
        }
        if self.config.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            "client=%s method=%s path=%s status=%s bytes_in=%s bytes_out=%s "
            "duration_ms=%.2f gzip=%s",
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_in"],
            event["bytes_out"],
            duration_ms,
            event["gzip"],
        )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run minimal HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=FILES_DIRECTORY,
        help="Filesystem directory where to search files to serve",
    )
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--buffer-size", type=int, default=BUFFER_SIZE)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL,
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        files_directory=args.directory,
        buffer_size=args.buffer_size,
        log_format=args.log_format,
    )


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="> %(asctime)s.%(msecs)03d %(threadName)s %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )
    server = HTTPServer(config_from_args(args))
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()


if __name__ == "__main__":
    main()
