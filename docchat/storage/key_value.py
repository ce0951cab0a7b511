"""Durable key-value stores used for workspace snapshots."""

import logging
import re
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyValueStore(Protocol):
    """Text key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Key-value store kept in a dict. State is lost with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore:
    """Key-value store keeping one UTF-8 file per key in a directory."""

    def __init__(self, directory: Path):
        """Initialize file store.

        Args:
            directory: Directory for value files (created if missing)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def get_path(self, key: str) -> Path:
        """Get the file path for a key.

        Raises:
            ValueError: If the key contains characters unsafe for a file name
        """
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key '{key}'")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.get_path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write a value, replacing the old file atomically."""
        path = self.get_path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)
        logger.debug(f"Wrote {len(value)} characters to {path}")

    def remove(self, key: str) -> None:
        self.get_path(key).unlink(missing_ok=True)
