from pathlib import Path

from app.common.cancellation import CancellationToken
from app.config.settings import Settings
from app.database.models import VerificationRecord
from app.database.repositories.verification_repository import VerificationRepository
from app.imaging.compressor import ImageCompressor
from app.imaging.metadata_extractor import ExifMetadataExtractor
from app.imaging.models import ExtractedLocation, UploadCandidate
from app.imaging.preview import PreviewHandle, TempFilePreviewFactory
from app.imaging.validator import ImageValidator
from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.factory import ObjectStoreFactory
from app.verification.auth import BaseAuthProvider
from app.verification.exceptions import (
    AttemptCancelledError,
    BusyError,
    ImageValidationError,
    NotAuthenticatedError,
    VerificationError,
)
from app.verification.listener import UploadListener
from app.verification.models import (
    CANCELLABLE_STATES,
    IN_FLIGHT_STATES,
    AttemptFailure,
    AttemptState,
    VerificationDetails,
)
from app.verification.pipeline import UploadContext, UploadStep
from app.verification.steps import (
    CompressStep,
    CreateRecordStep,
    ExtractMetadataStep,
    UploadImageStep,
    ValidateStep,
)


class VerificationUploadOrchestrator:
    """Runs one verification upload attempt at a time.

    Pipeline: validate -> extract metadata -> compress -> upload -> create record.
    Cancellation is honoured between stages until the upload begins. A failed
    record insert keeps the uploaded URL so that only the insert is retried.
    """

    def __init__(
        self,
        *,
        validator: ImageValidator,
        metadata_extractor: ExifMetadataExtractor,
        compressor: ImageCompressor,
        object_store: BaseObjectStore,
        verification_repo: VerificationRepository,
        auth: BaseAuthProvider,
        preview_factory: TempFilePreviewFactory,
        listener: UploadListener | None = None,
    ) -> None:
        self._record_step = CreateRecordStep(verification_repo)
        self._steps: list[UploadStep] = [
            ValidateStep(validator),
            ExtractMetadataStep(metadata_extractor),
            CompressStep(compressor),
            UploadImageStep(object_store),
            self._record_step,
        ]
        self._auth = auth
        self._preview_factory = preview_factory
        self._listener = listener or UploadListener()

        self._state = AttemptState.IDLE
        self._progress = 0
        self._failure: AttemptFailure | None = None
        self._candidate: UploadCandidate | None = None
        self._preview: PreviewHandle | None = None
        self._location: ExtractedLocation | None = None
        self._token: CancellationToken | None = None
        self._unrecorded: UploadContext | None = None

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def failure(self) -> AttemptFailure | None:
        return self._failure

    @property
    def candidate(self) -> UploadCandidate | None:
        return self._candidate

    @property
    def preview(self) -> PreviewHandle | None:
        return self._preview

    @property
    def location(self) -> ExtractedLocation | None:
        return self._location

    def select(self, candidate: UploadCandidate) -> PreviewHandle:
        """Make candidate the image for the next attempt and create its preview.

        Replaces any earlier candidate, cancelling its attempt if it has not
        started uploading yet.

        Raises:
            BusyError: if the current attempt is already uploading.
        """
        if self._state in IN_FLIGHT_STATES - CANCELLABLE_STATES:
            raise BusyError("Upload in progress, the photo can no longer be replaced")
        if self._state in CANCELLABLE_STATES and self._token is not None:
            Log.info("Replacing candidate, cancelling the in-flight attempt")
            self._token.cancel()
        self._drop_unrecorded()
        self._discard_candidate()
        self._candidate = candidate
        self._preview = self._preview_factory.create(candidate)
        Log.info(
            f"Selected {candidate.file_name} ({candidate.size} bytes)",
            content_type=candidate.content_type,
        )
        return self._preview

    def clear(self) -> None:
        """Drop the selected candidate and release its preview."""
        if self._state in IN_FLIGHT_STATES - CANCELLABLE_STATES:
            raise BusyError("Upload in progress, the photo can no longer be removed")
        if self._state in CANCELLABLE_STATES and self._token is not None:
            self._token.cancel()
        self._drop_unrecorded()
        self._discard_candidate()

    def cancel(self) -> bool:
        """Request cancellation. Returns False once the upload has begun."""
        if self._state in CANCELLABLE_STATES and self._token is not None:
            self._token.cancel()
            return True
        if self._state in IN_FLIGHT_STATES:
            return False
        if self._candidate is None:
            return False
        self._discard_candidate()
        self._set_state(AttemptState.CANCELLED)
        return True

    def start(
        self,
        details: VerificationDetails,
        cancel_token: CancellationToken | None = None,
    ) -> VerificationRecord:
        """Run a full attempt for the selected candidate.

        Raises:
            BusyError: if another attempt is in flight.
            NotAuthenticatedError: if no owner is signed in.
            ImageValidationError: if nothing is selected or the input is rejected.
            AttemptCancelledError: if cancelled before the upload began.
            VerificationError: for any other terminal stage failure.
        """
        if self._state in IN_FLIGHT_STATES:
            raise BusyError("An upload is already in progress")
        owner_id = self._auth.current_owner_id()
        if not owner_id:
            raise NotAuthenticatedError("Please sign in to upload a verification")
        if self._candidate is None:
            raise ImageValidationError("Please select an image")

        token = cancel_token or CancellationToken()
        self._token = token
        self._progress = 0
        self._failure = None
        self._location = None
        self._drop_unrecorded()

        context = UploadContext(
            candidate=self._candidate,
            details=details,
            owner_id=owner_id,
        )
        Log.info(
            f"Starting verification upload for {details.tree_name}",
            owner_id=owner_id,
        )

        for step in self._steps:
            if step.stage in (*CANCELLABLE_STATES, AttemptState.UPLOADING) and token.cancelled:
                self._cancel_attempt(context)
                raise AttemptCancelledError("Upload cancelled")
            # Listener errors fail the attempt like stage errors do.
            try:
                self._enter(step.stage, step.progress)
                context = step.run(context)
                if step.stage == AttemptState.EXTRACTING:
                    self._location = context.metadata.location
                    self._listener.on_location(self._location)
                    self._listener.on_metadata(context.metadata)
            except Exception as exc:
                self._fail(step.stage, exc, context)
                raise

        if context.record is None:
            raise RuntimeError("Pipeline finished without a verification record")
        return self._succeed(context.record)

    def retry_record_creation(self) -> VerificationRecord:
        """Re-run only the record insert for an image that is already uploaded.

        Raises:
            BusyError: if an attempt is in flight.
            VerificationError: if there is no uploaded image awaiting a record.
            RecordCreationError: if the insert fails again.
        """
        if self._state in IN_FLIGHT_STATES:
            raise BusyError("An upload is already in progress")
        context = self._unrecorded
        if context is None:
            raise VerificationError("There is no uploaded photo waiting to be saved")

        Log.info(f"Retrying record creation for {context.object_key}")
        self._failure = None
        try:
            self._enter(self._record_step.stage, self._record_step.progress)
            context = self._record_step.run(context)
        except Exception as exc:
            self._fail(self._record_step.stage, exc, context)
            raise
        if context.record is None:
            raise RuntimeError("Record step finished without a verification record")
        return self._succeed(context.record)

    def _enter(self, state: AttemptState, progress: int) -> None:
        self._set_state(state)
        self._progress = max(self._progress, progress)
        self._listener.on_progress(self._progress)

    def _set_state(self, state: AttemptState) -> None:
        self._state = state
        Log.debug(f"Verification attempt entered {state.value}")
        self._listener.on_state_change(state)

    def _succeed(self, record: VerificationRecord) -> VerificationRecord:
        self._unrecorded = None
        self._token = None
        self._discard_candidate()
        self._set_state(AttemptState.SUCCEEDED)
        self._progress = 100
        self._listener.on_progress(self._progress)
        Log.info(
            f"Verification {record.id} created for {record.tree_name}",
            image_url=record.image_url,
        )
        self._listener.on_succeeded(record)
        return record

    def _fail(self, stage: AttemptState, exc: Exception, context: UploadContext) -> None:
        # Once the object is stored, only the record insert remains to be retried.
        partial = bool(context.image_url) and context.record is None
        self._unrecorded = context if partial else None
        self._token = None
        self._failure = AttemptFailure(stage=stage, reason=str(exc), partial=partial)
        self._set_state(AttemptState.FAILED)
        Log.error(f"Verification attempt failed during {stage.value}: {exc}")
        self._listener.on_failed(self._failure)

    def _cancel_attempt(self, context: UploadContext) -> None:
        self._token = None
        # A replacement candidate has already released the one this attempt used.
        if self._candidate is context.candidate:
            self._discard_candidate()
        self._set_state(AttemptState.CANCELLED)
        Log.info("Verification attempt cancelled before upload")

    def _drop_unrecorded(self) -> None:
        if self._unrecorded is None:
            return
        Log.warning(
            "Abandoning an uploaded image that has no verification record",
            object_key=self._unrecorded.object_key,
        )
        self._unrecorded = None

    def _discard_candidate(self) -> None:
        if self._preview is not None:
            self._preview.release()
        self._preview = None
        self._candidate = None


def build_orchestrator(
    settings: Settings,
    auth: BaseAuthProvider,
    listener: UploadListener | None = None,
) -> VerificationUploadOrchestrator:
    """Build an orchestrator with all adapters configured from settings."""
    preview_dir = Path(settings.preview_dir) if settings.preview_dir else None
    return VerificationUploadOrchestrator(
        validator=ImageValidator(max_bytes=settings.upload_max_bytes),
        metadata_extractor=ExifMetadataExtractor(),
        compressor=ImageCompressor(
            max_bytes=settings.compression_max_bytes,
            max_dimension=settings.compression_max_dimension,
            quality=settings.compression_quality,
        ),
        object_store=ObjectStoreFactory.create(settings),
        verification_repo=VerificationRepository(),
        auth=auth,
        preview_factory=TempFilePreviewFactory(preview_dir),
        listener=listener,
    )
