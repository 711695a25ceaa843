from pathlib import Path
from unittest.mock import patch

import pytest

from app.storage.exceptions import StoreError
from app.storage.local_adapter import LocalObjectStore, object_file_path


class TestObjectFilePath:
    def test_builds_path_under_root(self, tmp_path: Path) -> None:
        path = object_file_path(tmp_path, "user-1/1700000000000-oak.jpg")

        assert path == (tmp_path / "user-1" / "1700000000000-oak.jpg").resolve()

    def test_rejects_escaping_key(self, tmp_path: Path) -> None:
        with pytest.raises(StoreError, match="escapes the storage root"):
            object_file_path(tmp_path, "../outside.jpg")


class TestLocalObjectStore:
    def test_put_writes_file_and_returns_public_url(self, tmp_path: Path) -> None:
        store = LocalObjectStore(tmp_path, "http://cdn.test/files/")

        url = store.put("user-1/1-oak.jpg", b"jpeg", "image/jpeg")

        assert url == "http://cdn.test/files/user-1/1-oak.jpg"
        assert (tmp_path / "user-1" / "1-oak.jpg").read_bytes() == b"jpeg"
        assert store.exists("user-1/1-oak.jpg") is True

    def test_exists_is_false_for_missing_key(self, tmp_path: Path) -> None:
        assert LocalObjectStore(tmp_path, "http://cdn.test").exists("nobody/x.jpg") is False

    def test_write_failure_raises_store_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "user-1"
        blocker.write_text("not a directory")
        store = LocalObjectStore(tmp_path, "http://cdn.test")

        with pytest.raises(StoreError, match="Failed to write object"):
            store.put("user-1/1-oak.jpg", b"jpeg", "image/jpeg")

    def test_failed_write_leaves_nothing_behind(self, tmp_path: Path) -> None:
        store = LocalObjectStore(tmp_path, "http://cdn.test")

        with patch("app.storage.local_adapter.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreError, match="disk full"):
                store.put("user-1/1-oak.jpg", b"jpeg", "image/jpeg")

        assert list((tmp_path / "user-1").iterdir()) == []
        assert store.exists("user-1/1-oak.jpg") is False
