from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

from app.database.models import VerificationRecord
from app.imaging.models import CompressedAsset, PhotoMetadata, UploadCandidate
from app.verification.models import AttemptState, VerificationDetails


@dataclass(slots=True)
class UploadContext:
    candidate: UploadCandidate
    details: VerificationDetails
    owner_id: str
    metadata: PhotoMetadata = field(default_factory=PhotoMetadata)
    compressed: CompressedAsset | None = None
    object_key: str = ""
    image_url: str = ""
    record: VerificationRecord | None = None


class UploadStep(ABC):
    stage: ClassVar[AttemptState]
    progress: ClassVar[int]

    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError
