from typing import ClassVar

from app.imaging.models import UploadCandidate, ValidationResult

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class ImageValidator:
    """Accepts or rejects an upload candidate by media type and size."""

    ALLOWED_CONTENT_TYPES: ClassVar[frozenset[str]] = frozenset(
        {"image/jpeg", "image/jpg", "image/png", "image/webp"}
    )

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self._max_bytes = max_bytes

    def validate(self, candidate: UploadCandidate) -> ValidationResult:
        """Check the candidate against the allow-list, then the size ceiling.

        The first failing rule determines the reported error.
        """
        if candidate.content_type.lower() not in self.ALLOWED_CONTENT_TYPES:
            return ValidationResult(
                valid=False,
                error="Please upload a valid image file (JPEG, PNG, or WebP)",
            )
        if candidate.size > self._max_bytes:
            return ValidationResult(
                valid=False,
                error=f"Image size must be less than {self._max_bytes // (1024 * 1024)}MB",
            )
        return ValidationResult(valid=True)
