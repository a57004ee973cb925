"""File-backed key-value storage, one file per key."""

from __future__ import annotations

import os
import re
from pathlib import Path

from proxiscan.core.errors import StorageError

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def default_data_dir() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "proxiscan"


class FileStore:
    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or default_data_dir()

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise StorageError(f"Invalid storage key '{key}'")
        return self.directory / key

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read {path}: {exc}") from exc

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(value)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc
