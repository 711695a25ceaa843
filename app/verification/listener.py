from app.database.models import VerificationRecord
from app.imaging.models import ExtractedLocation, PhotoMetadata
from app.verification.models import AttemptFailure, AttemptState


class UploadListener:
    """Receives progress and outcome signals from the orchestrator.

    Every hook is a no-op here; display code overrides the ones it renders.
    """

    def on_state_change(self, state: AttemptState) -> None:
        pass

    def on_progress(self, progress: int) -> None:
        pass

    def on_location(self, location: ExtractedLocation | None) -> None:
        """Called after extraction; None means no GPS data was found."""

    def on_metadata(self, metadata: PhotoMetadata) -> None:
        pass

    def on_succeeded(self, record: VerificationRecord) -> None:
        pass

    def on_failed(self, failure: AttemptFailure) -> None:
        pass
