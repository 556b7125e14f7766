from datetime import datetime
from typing import Optional
from uuid import UUID
from asyncpg import Connection, UniqueViolationError


class DuplicateCertificateError(ValueError):
    """Raised when (user_id, month, year) already has a certificate."""


class CertificateRepository:
    """asyncpg access to the life_certificates table."""

    def __init__(self, conn: Connection):
        self.conn = conn

    # ------------------ Retrieval Methods ------------------ #

    async def get_by_id(self, certificate_id: UUID) -> dict | None:
        sql = "SELECT * FROM life_certificates WHERE id = $1;"
        record = await self.conn.fetchrow(sql, certificate_id)
        return dict(record) if record else None

    async def get_for_period(self, user_id: UUID, month: int, year: int) -> dict | None:
        sql = """
            SELECT * FROM life_certificates
            WHERE user_id = $1 AND month = $2 AND year = $3;
        """
        record = await self.conn.fetchrow(sql, user_id, month, year)
        return dict(record) if record else None

    async def list_by_user(self, user_id: UUID) -> list[dict]:
        sql = "SELECT * FROM life_certificates WHERE user_id = $1 ORDER BY created_at DESC;"
        records = await self.conn.fetch(sql, user_id)
        return [dict(record) for record in records]

    async def list_all(self) -> list[dict]:
        sql = "SELECT * FROM life_certificates ORDER BY created_at DESC;"
        records = await self.conn.fetch(sql)
        return [dict(record) for record in records]

    # ------------------ Creation ------------------ #

    async def create(
        self,
        user_id: UUID,
        month: int,
        year: int,
        witness_name: str,
        witness_phone: str,
        witness_relationship: str,
        certificate_photo_url: Optional[str] = None,
    ) -> dict:
        sql = """
            INSERT INTO life_certificates
            (user_id, month, year, witness_name, witness_phone, witness_relationship,
             certificate_photo_url, status)
            VALUES ($1, $2, $3, $4, $5, $6, $7, 'pending')
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(
                sql, user_id, month, year, witness_name, witness_phone,
                witness_relationship, certificate_photo_url,
            )
        except UniqueViolationError:
            raise DuplicateCertificateError("Certificate for this period already exists")
        return dict(record)

    # ------------------ Review ------------------ #

    async def update_review(
        self,
        certificate_id: UUID,
        status: str,
        admin_notes: Optional[str],
        reviewed_by: UUID,
        reviewed_at: datetime,
        expected_status: Optional[str] = None,
    ) -> dict | None:
        """Set the review fields in one statement.

        With ``expected_status`` the row only changes if its stored status still
        matches; ``None`` is returned when nothing was updated.
        """
        sql = """
            UPDATE life_certificates
            SET status = $2, admin_notes = $3, reviewed_by = $4, reviewed_at = $5
            WHERE id = $1
              AND ($6::text IS NULL OR status::text = $6::text)
            RETURNING *;
        """
        record = await self.conn.fetchrow(
            sql, certificate_id, status, admin_notes, reviewed_by, reviewed_at, expected_status
        )
        return dict(record) if record else None
