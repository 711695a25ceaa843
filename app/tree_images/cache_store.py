import json
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from app.database.models import ImageCacheEntry
from app.logging.logger import Log


class BaseImageCacheStore(ABC):
    """Contract for persistent stores backing the resolved-image cache."""

    @abstractmethod
    def get(self, tree_name: str) -> ImageCacheEntry | None:
        """Return the stored entry for a tree name, expired or not."""

    @abstractmethod
    def put(self, entry: ImageCacheEntry) -> None:
        """Insert or replace the entry for its tree name."""

    @abstractmethod
    def delete(self, tree_name: str) -> None:
        """Remove the entry for a tree name if present."""


class JsonFileImageCacheStore(BaseImageCacheStore):
    """On-device cache store kept as a single JSON document.

    The file is loaded once on construction and rewritten on every change.
    A missing or unreadable file starts the cache empty.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._entries: dict[str, ImageCacheEntry] = self._load()

    def get(self, tree_name: str) -> ImageCacheEntry | None:
        return self._entries.get(tree_name)

    def put(self, entry: ImageCacheEntry) -> None:
        self._entries[entry.tree_name] = entry
        self._save()

    def delete(self, tree_name: str) -> None:
        if self._entries.pop(tree_name, None) is not None:
            self._save()

    def _load(self) -> dict[str, ImageCacheEntry]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return {
                name: ImageCacheEntry(
                    tree_name=name,
                    image_url=item["url"],
                    fetched_at=datetime.fromisoformat(item["fetched_at"]),
                )
                for name, item in raw.items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            Log.warning(f"Could not load image cache {self._path}: {exc}")
            return {}

    def _save(self) -> None:
        payload = {
            name: {"url": entry.image_url, "fetched_at": entry.fetched_at.isoformat()}
            for name, entry in self._entries.items()
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)
