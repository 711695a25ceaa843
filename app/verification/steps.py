import re
import time
from collections.abc import Callable
from pathlib import PurePosixPath

from app.database.models import NewVerification
from app.database.repositories.verification_repository import VerificationRepository
from app.imaging.compressor import ImageCompressor
from app.imaging.exceptions import CompressionError
from app.imaging.metadata_extractor import ExifMetadataExtractor
from app.imaging.validator import ImageValidator
from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.exceptions import StoreError
from app.verification.exceptions import (
    ImageCompressionError,
    ImageValidationError,
    RecordCreationError,
    UploadError,
)
from app.verification.models import AttemptState
from app.verification.pipeline import UploadContext, UploadStep
from app.verification.validation import validate_details

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def current_millis() -> int:
    return time.time_ns() // 1_000_000


def build_object_key(owner_id: str, file_name: str, timestamp_ms: int) -> str:
    """Object key ``{owner_id}/{timestamp_ms}-{file_name}`` with a path-safe name."""
    base_name = PurePosixPath(file_name.replace("\\", "/")).name
    safe_name = _UNSAFE_NAME_CHARS.sub("_", base_name).strip("._") or "photo.jpg"
    return f"{owner_id}/{timestamp_ms}-{safe_name}"


class ValidateStep(UploadStep):
    stage = AttemptState.VALIDATING
    progress = 10

    def __init__(self, validator: ImageValidator) -> None:
        self._validator = validator

    def run(self, context: UploadContext) -> UploadContext:
        result = self._validator.validate(context.candidate)
        if not result.valid:
            raise ImageValidationError(result.error or "Invalid image")
        problem = validate_details(context.details)
        if problem is not None:
            raise ImageValidationError(problem)
        return context


class ExtractMetadataStep(UploadStep):
    stage = AttemptState.EXTRACTING
    progress = 30

    def __init__(self, extractor: ExifMetadataExtractor) -> None:
        self._extractor = extractor

    def run(self, context: UploadContext) -> UploadContext:
        context.metadata = self._extractor.extract_metadata(context.candidate)
        return context


class CompressStep(UploadStep):
    stage = AttemptState.COMPRESSING
    progress = 50

    def __init__(self, compressor: ImageCompressor) -> None:
        self._compressor = compressor

    def run(self, context: UploadContext) -> UploadContext:
        try:
            context.compressed = self._compressor.compress(context.candidate)
        except CompressionError as exc:
            raise ImageCompressionError("Failed to process image") from exc
        return context


class UploadImageStep(UploadStep):
    stage = AttemptState.UPLOADING
    progress = 60

    def __init__(
        self,
        object_store: BaseObjectStore,
        timestamp_ms: Callable[[], int] = current_millis,
    ) -> None:
        self._object_store = object_store
        self._timestamp_ms = timestamp_ms

    def run(self, context: UploadContext) -> UploadContext:
        if context.compressed is None:
            raise ValueError("UploadContext.compressed must be set before upload")
        key = build_object_key(
            context.owner_id, context.compressed.file_name, self._timestamp_ms()
        )
        try:
            context.image_url = self._object_store.put(
                key, context.compressed.data, context.compressed.content_type
            )
        except StoreError as exc:
            Log.error(f"Upload of {key} failed: {exc}", owner_id=context.owner_id)
            raise UploadError("Failed to upload verification photo") from exc
        context.object_key = key
        return context


class CreateRecordStep(UploadStep):
    stage = AttemptState.RECORD_CREATING
    progress = 80

    def __init__(self, verification_repo: VerificationRepository) -> None:
        self._verification_repo = verification_repo

    def run(self, context: UploadContext) -> UploadContext:
        if not context.image_url:
            raise ValueError("UploadContext.image_url must be set before record creation")
        location = context.metadata.location
        verification = NewVerification(
            owner_id=context.owner_id,
            match_id=context.details.match_id,
            tree_name=context.details.tree_name,
            image_url=context.image_url,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            planting_date=context.details.planting_date,
            notes=context.details.notes or None,
        )
        try:
            context.record = self._verification_repo.insert(verification)
        except Exception as exc:
            Log.error(
                f"Stored {context.object_key} but could not create its record: {exc}",
                owner_id=context.owner_id,
                image_url=context.image_url,
            )
            raise RecordCreationError(
                "Photo uploaded but the verification could not be saved",
                object_key=context.object_key,
                image_url=context.image_url,
            ) from exc
        return context
