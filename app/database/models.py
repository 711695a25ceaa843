from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


@dataclass(frozen=True)
class NewVerification:
    """Values for a planting_verifications row about to be inserted."""

    owner_id: str
    tree_name: str
    image_url: str
    planting_date: date
    match_id: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class VerificationRecord:
    """Represents a row from the planting_verifications table."""

    id: str
    owner_id: str
    tree_name: str
    image_url: str
    planting_date: date
    status: VerificationStatus
    match_id: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ImageCacheEntry:
    """Represents a row from the tree_image_cache table."""

    tree_name: str
    image_url: str
    fetched_at: datetime
