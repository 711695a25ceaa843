from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UploadCandidate:
    """A user-selected photo awaiting upload."""

    data: bytes
    content_type: str
    file_name: str
    declared_size: int | None = None

    @property
    def size(self) -> int:
        """Byte size as declared by the client, falling back to the payload length."""
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the image validator."""

    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class ExtractedLocation:
    """Signed decimal-degree coordinates recovered from image metadata."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class PhotoMetadata:
    """Everything the extractor recovers from the embedded EXIF segment."""

    location: ExtractedLocation | None = None
    taken_at: datetime | None = None


@dataclass(frozen=True)
class CompressedAsset:
    """Re-encoded image bounded by the compressor's byte ceiling."""

    data: bytes
    content_type: str
    width: int
    height: int
    file_name: str

    @property
    def size(self) -> int:
        return len(self.data)
