"""Filesystem byte store backing the /files route."""

from pathlib import Path


class DirectoryStore:
    """Reads and overwrites whole files addressed by name inside one directory.

    Concurrent reads and writes of the same name are not synchronized.
    """

    def __init__(self, directory: str | Path) -> None:
        self.root = Path(directory).resolve()

    def resolve(self, name: str) -> Path | None:
        """Return the path for ``name`` or None when it escapes the root."""
        candidate = (self.root / name).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError:
            return None
        return candidate

    def read(self, name: str) -> bytes:
        path = self.resolve(name)
        if path is None:
            raise FileNotFoundError(name)
        return path.read_bytes()

    def write(self, name: str, data: bytes) -> None:
        path = self.resolve(name)
        if path is None:
            raise PermissionError(f"Refusing to write outside {self.root}: {name}")
        path.write_bytes(data)
