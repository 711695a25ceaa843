from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.exceptions import RecordInsertError, RecordNotFoundError
from app.database.models import NewVerification, VerificationRecord, VerificationStatus

_COLUMNS = """
    id, user_id, tree_match_id, tree_name, image_url, latitude, longitude,
    planting_date, notes, status, created_at
"""


class VerificationRepository:
    """Database operations for the planting_verifications table."""

    def insert(self, verification: NewVerification) -> VerificationRecord:
        """Insert a pending verification and return the stored row.

        Raises:
            RecordInsertError: if the database rejects the row.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO planting_verifications
                        (user_id, tree_match_id, tree_name, image_url, latitude,
                         longitude, planting_date, notes, status)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, 'pending')
                        RETURNING {_COLUMNS}
                        """,
                        (
                            verification.owner_id,
                            verification.match_id,
                            verification.tree_name,
                            verification.image_url,
                            verification.latitude,
                            verification.longitude,
                            verification.planting_date,
                            verification.notes,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise RecordInsertError(f"Failed to insert verification: {exc}") from exc

        if row is None:
            raise RecordInsertError("Insert returned no row")
        return _to_record(row)

    def find_by_id(self, verification_id: str) -> VerificationRecord:
        """Find a verification by ID.

        Raises:
            RecordNotFoundError: if no verification with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM planting_verifications WHERE id = %s",
                    (verification_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Verification {verification_id} not found")
        return _to_record(row)


def _to_record(row: dict[str, Any]) -> VerificationRecord:
    return VerificationRecord(
        id=str(row["id"]),
        owner_id=str(row["user_id"]),
        match_id=str(row["tree_match_id"]) if row["tree_match_id"] is not None else None,
        tree_name=row["tree_name"],
        image_url=row["image_url"],
        latitude=float(row["latitude"]) if row["latitude"] is not None else None,
        longitude=float(row["longitude"]) if row["longitude"] is not None else None,
        planting_date=row["planting_date"],
        notes=row["notes"],
        status=VerificationStatus(row["status"]),
        created_at=row["created_at"],
    )
