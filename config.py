"""Configuration constants and the immutable server configuration value."""

from dataclasses import dataclass

HOST: str = "0.0.0.0"
PORT: int = 4221
BUFFER_SIZE: int = 1024
FILES_DIRECTORY: str = "/"
LOG_FORMAT: str = "plain"
LOG_LEVEL: str = "INFO"
ACCEPT_TIMEOUT_SECS: float = 0.2
WIRE_ENCODING: str = "iso-8859-1"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Read-only settings shared by every connection handler."""

    host: str = HOST
    port: int = PORT
    files_directory: str = FILES_DIRECTORY
    buffer_size: int = BUFFER_SIZE
    log_format: str = LOG_FORMAT

    def __post_init__(self) -> None:
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        if self.log_format not in {"plain", "json"}:
            raise ValueError(f"Unsupported log format: {self.log_format}")
