from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class AttemptState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXTRACTING = "extracting"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    RECORD_CREATING = "record_creating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


IN_FLIGHT_STATES = frozenset(
    {
        AttemptState.VALIDATING,
        AttemptState.EXTRACTING,
        AttemptState.COMPRESSING,
        AttemptState.UPLOADING,
        AttemptState.RECORD_CREATING,
    }
)

# Once the binary upload begins the attempt runs to completion or failure.
CANCELLABLE_STATES = frozenset(
    {AttemptState.VALIDATING, AttemptState.EXTRACTING, AttemptState.COMPRESSING}
)


@dataclass(frozen=True)
class VerificationDetails:
    """User-entered fields submitted with a verification photo."""

    tree_name: str
    planting_date: date = field(default_factory=date.today)
    match_id: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class AttemptFailure:
    """Why and where an attempt stopped."""

    stage: AttemptState
    reason: str
    partial: bool = False
