from __future__ import annotations

from pathlib import Path

import pytest

from proxiscan.adapters.file_store import FileStore, default_data_dir
from proxiscan.core.errors import StorageError


def test_missing_key_is_none(tmp_path: Path) -> None:
    assert FileStore(tmp_path / "store").get("ble_favorites") is None


def test_set_then_get(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "store")
    store.set("ble_favorites", b'["A"]')
    assert store.get("ble_favorites") == b'["A"]'
    assert (tmp_path / "store" / "ble_favorites").read_bytes() == b'["A"]'


def test_default_dir_follows_xdg(isolated_xdg: Path) -> None:
    assert default_data_dir() == isolated_xdg / "data" / "proxiscan"


def test_path_like_keys_rejected(tmp_path: Path) -> None:
    with pytest.raises(StorageError):
        FileStore(tmp_path).set("../escape", b"x")


def test_write_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageError):
        FileStore(blocker / "store").set("ble_favorites", b"[]")
