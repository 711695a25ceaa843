import os
from pathlib import Path

from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.exceptions import StoreError


def object_file_path(files_root: Path, key: str) -> Path:
    """Build path to an object file: {files_root}/{owner_id}/{name}"""
    path = (files_root / key).resolve()
    if not path.is_relative_to(files_root.resolve()):
        raise StoreError(f"Object key '{key}' escapes the storage root")
    return path


class LocalObjectStore(BaseObjectStore):
    """Stores objects as files on local disk served from a public base URL."""

    def __init__(self, files_root: Path, public_base_url: str) -> None:
        self._files_root = files_root
        self._public_base_url = public_base_url.rstrip("/")

    def put(self, key: str, data: bytes, content_type: str) -> str:
        path = object_file_path(self._files_root, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to write object {key}: {exc}") from exc

        # Readers never see a partially written object.
        tmp_path = path.with_name(f"{path.name}.part")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StoreError(f"Failed to write object {key}: {exc}") from exc
        Log.info(f"Stored {len(data)} bytes at {path}", content_type=content_type)
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{key}"

    def exists(self, key: str) -> bool:
        return object_file_path(self._files_root, key).is_file()
