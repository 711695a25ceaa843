from datetime import date

import pytest

from app.database.exceptions import RecordInsertError, RecordNotFoundError
from app.database.models import NewVerification, VerificationStatus
from app.database.repositories.verification_repository import VerificationRepository


@pytest.mark.integration
class TestVerificationRepositoryInsert:
    def test_insert_returns_pending_record(
        self,
        owner_id: str,
        integration_cleanup: list[tuple[str, str]],
    ) -> None:
        repo = VerificationRepository()
        record = repo.insert(
            NewVerification(
                owner_id=owner_id,
                tree_name="Mango",
                image_url=f"http://cdn.test/files/{owner_id}/1-mango.jpg",
                planting_date=date(2025, 3, 1),
                latitude=-1.29,
                longitude=36.82,
                notes="Near the school gate",
            )
        )
        integration_cleanup.append(("planting_verifications", record.id))

        assert record.owner_id == owner_id
        assert record.status is VerificationStatus.PENDING
        assert record.latitude == pytest.approx(-1.29)
        assert record.longitude == pytest.approx(36.82)
        assert record.created_at is not None

        found = repo.find_by_id(record.id)
        assert found == record

    def test_insert_without_location(
        self,
        owner_id: str,
        integration_cleanup: list[tuple[str, str]],
    ) -> None:
        record = VerificationRepository().insert(
            NewVerification(
                owner_id=owner_id,
                tree_name="Neem",
                image_url="http://cdn.test/files/neem.jpg",
                planting_date=date(2025, 3, 1),
            )
        )
        integration_cleanup.append(("planting_verifications", record.id))

        assert record.latitude is None
        assert record.longitude is None

    def test_invalid_owner_raises_insert_error(self, integration_pool: None) -> None:
        with pytest.raises(RecordInsertError):
            VerificationRepository().insert(
                NewVerification(
                    owner_id="not-a-uuid",
                    tree_name="Neem",
                    image_url="http://cdn.test/files/neem.jpg",
                    planting_date=date(2025, 3, 1),
                )
            )


@pytest.mark.integration
class TestVerificationRepositoryFindById:
    def test_find_by_id_raises_when_not_found(self, integration_pool: None) -> None:
        with pytest.raises(RecordNotFoundError, match="not found"):
            VerificationRepository().find_by_id("00000000-0000-0000-0000-000000000000")
