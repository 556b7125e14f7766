# lifecert/services/certificate_service.py

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from lifecert.core.config import settings
from lifecert.core.utils import current_period, period_label, photo_extension
from lifecert.repositories.certificate_repo import CertificateRepository, DuplicateCertificateError
from lifecert.repositories.user_repo import UserRepository
from lifecert.schemas.certificate_schema import CertificateSubmit, PhotoUpload
from lifecert.services.storage import LocalStorage

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED_MESSAGE = "You have already submitted a certificate for this month"


class CertificateAlreadySubmitted(Exception): pass
class CertificateNotFound(Exception): pass
class ReviewConflict(Exception): pass


def photo_key(user_id, year: int, month: int, filename: str) -> str:
    return f"{user_id}/{year}/{month}.{photo_extension(filename)}"


class CertificateService:
    """Pensioner submission and history, and the admin review workflow.

    Every step is its own round-trip; nothing spans a transaction. The unique
    (user_id, month, year) constraint is what finally rejects a duplicate, the
    lookup in ``submit`` only avoids uploading a photo that cannot be used.
    """

    def __init__(
        self,
        cert_repo: CertificateRepository,
        user_repo: UserRepository,
        storage: Optional[LocalStorage] = None,
        pool=None,
    ):
        self.cert_repo = cert_repo
        self.user_repo = user_repo
        self.storage = storage
        self.pool = pool

    # ------------------ Pensioner ------------------ #

    async def submit(
        self,
        user: dict,
        form: CertificateSubmit,
        photo: Optional[PhotoUpload] = None,
        now: Optional[datetime] = None,
    ) -> tuple[dict, str]:
        month, year = current_period(now)

        existing = await self.cert_repo.get_for_period(user['id'], month, year)
        if existing:
            raise CertificateAlreadySubmitted(ALREADY_SUBMITTED_MESSAGE)

        photo_url = None
        if photo is not None:
            if self.storage is None:
                raise RuntimeError("Storage is not configured")
            key = photo_key(user['id'], year, month, photo.filename)
            await run_in_threadpool(
                self.storage.upload, key, photo.content, content_type=photo.content_type
            )
            photo_url = self.storage.get_public_url(key)

        try:
            certificate = await self.cert_repo.create(
                user_id=user['id'],
                month=month,
                year=year,
                witness_name=form.witness_name,
                witness_phone=form.witness_phone,
                witness_relationship=form.witness_relationship,
                certificate_photo_url=photo_url,
            )
        except DuplicateCertificateError:
            # lost a race with a concurrent submission for the same period
            raise CertificateAlreadySubmitted(ALREADY_SUBMITTED_MESSAGE)

        message = f"Your life certificate for {period_label(month, year)} has been submitted for review."
        logger.info(f"Certificate {certificate['id']} submitted by {user['id']} for {month}/{year}")
        return certificate, message

    async def has_submitted(self, user_id: UUID, now: Optional[datetime] = None) -> bool:
        month, year = current_period(now)
        return await self.cert_repo.get_for_period(user_id, month, year) is not None

    async def history(self, user_id: UUID) -> list[dict]:
        return await self.cert_repo.list_by_user(user_id)

    # ------------------ Admin ------------------ #

    async def pensioners(self) -> list[dict]:
        return await self.user_repo.list_by_role("pensioner")

    async def _fetch_overview_rows(self) -> tuple[list[dict], list[dict]]:
        """Certificates and pensioners, in parallel when the pool has a spare connection.

        The request already holds one connection; the second is borrowed only
        for the pensioner query and given back at once. An exhausted pool
        falls back to two queries on the request's own connection.
        """
        if self.pool is not None:
            try:
                conn = await self.pool.acquire(timeout=settings.SPARE_CONNECTION_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("No spare connection for the overview; querying sequentially")
            else:
                try:
                    certificates, pensioners = await asyncio.gather(
                        self.cert_repo.list_all(),
                        UserRepository(conn).list_by_role("pensioner"),
                    )
                    return certificates, pensioners
                finally:
                    await self.pool.release(conn)

        certificates = await self.cert_repo.list_all()
        pensioners = await self.pensioners()
        return certificates, pensioners

    async def overview(self) -> dict:
        certificates, pensioners = await self._fetch_overview_rows()
        by_id = {p['id']: p for p in pensioners}

        rows = []
        for certificate in certificates:
            pensioner = by_id.get(certificate['user_id'])
            rows.append({
                **certificate,
                "pensioner_name": pensioner['full_name'] if pensioner else None,
                "pension_number": pensioner['pension_number'] if pensioner else None,
            })

        stats = {
            "total_pensioners": len(pensioners),
            "total_certificates": len(certificates),
            "pending_certificates": sum(1 for c in certificates if c['status'] == "pending"),
            "approved_certificates": sum(1 for c in certificates if c['status'] == "approved"),
        }
        return {"stats": stats, "certificates": rows, "pensioners": pensioners}

    async def detail(self, certificate_id: UUID) -> dict:
        certificate = await self.cert_repo.get_by_id(certificate_id)
        if certificate is None:
            raise CertificateNotFound("Certificate not found")
        pensioner = await self.user_repo.get_by_id(certificate['user_id'])
        return {"certificate": certificate, "pensioner": pensioner}

    async def review(
        self,
        certificate_id: UUID,
        admin: dict,
        status: str,
        admin_notes: Optional[str],
        expected_status: Optional[str] = None,
    ) -> dict:
        if status not in ("approved", "rejected", "needs_review"):
            raise ValueError(f"Invalid review status: {status}")

        current = await self.cert_repo.get_by_id(certificate_id)
        if current is None:
            raise CertificateNotFound("Certificate not found")

        updated = await self.cert_repo.update_review(
            certificate_id,
            status=status,
            admin_notes=admin_notes,
            reviewed_by=admin['id'],
            reviewed_at=datetime.now(timezone.utc),
            expected_status=expected_status,
        )
        if updated is None:
            raise ReviewConflict(
                "Certificate was reviewed by someone else in the meantime; reload and try again"
            )

        logger.info(f"Certificate {certificate_id} marked {status} by {admin['id']}")
        return updated
