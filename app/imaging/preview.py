import tempfile
from pathlib import Path

from app.imaging.models import UploadCandidate
from app.logging.logger import Log

_SUFFIXES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class PreviewHandle:
    """Temporary on-disk copy of a candidate used for local display.

    The handle owns its file until release() is called; releasing twice is a no-op.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._released = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def uri(self) -> str:
        return self._path.as_uri()

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._path.unlink(missing_ok=True)
        Log.debug(f"Released preview {self._path}")


class TempFilePreviewFactory:
    """Creates preview handles as temporary files under a directory."""

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory

    def create(self, candidate: UploadCandidate) -> PreviewHandle:
        suffix = _SUFFIXES.get(candidate.content_type.lower(), "")
        with tempfile.NamedTemporaryFile(
            prefix="preview-",
            suffix=suffix,
            dir=self._directory,
            delete=False,
        ) as handle:
            handle.write(candidate.data)
        return PreviewHandle(Path(handle.name))
