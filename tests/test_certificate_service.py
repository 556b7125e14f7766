import asyncio
import uuid
from datetime import datetime

import pytest
from pydantic import ValidationError

from lifecert.schemas.certificate_schema import CertificateSubmit, PhotoUpload
from lifecert.services.certificate_service import (
    CertificateAlreadySubmitted,
    CertificateNotFound,
    CertificateService,
    ReviewConflict,
    photo_key,
)

JUNE_2024 = datetime(2024, 6, 15, 10, 30)


@pytest.fixture
def service(cert_repo, user_repo, storage):
    return CertificateService(cert_repo, user_repo, storage)


@pytest.fixture
def form():
    return CertificateSubmit(
        witness_name="Jane Doe",
        witness_phone="+1-555-0199",
        witness_relationship="Neighbor",
    )


def test_submit_creates_pending_certificate_without_photo(service, pensioner, form):
    certificate, message = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))

    assert certificate["status"] == "pending"
    assert certificate["user_id"] == pensioner["id"]
    assert (certificate["month"], certificate["year"]) == (6, 2024)
    assert certificate["witness_name"] == "Jane Doe"
    assert certificate["certificate_photo_url"] is None
    assert message == "Your life certificate for June 2024 has been submitted for review."


def test_second_submission_same_period_is_rejected(service, pensioner, form, cert_repo):
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))

    with pytest.raises(CertificateAlreadySubmitted, match="already submitted"):
        asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    assert len(cert_repo.rows) == 1


def test_unique_violation_on_insert_is_reported_as_already_submitted(service, pensioner, form, cert_repo):
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    # a concurrent request that passed the lookup before the first insert landed
    cert_repo.skip_period_lookup = True

    with pytest.raises(CertificateAlreadySubmitted):
        asyncio.run(service.submit(pensioner, form, now=JUNE_2024))


def test_next_month_is_a_new_period(service, pensioner, form):
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    certificate, _ = asyncio.run(service.submit(pensioner, form, now=datetime(2024, 7, 1)))
    assert certificate["month"] == 7


def test_photo_is_stored_under_user_year_month(service, pensioner, form, storage):
    photo = PhotoUpload(filename="proof.PNG", content=b"\x89PNG", content_type="image/png")

    certificate, _ = asyncio.run(service.submit(pensioner, form, photo, now=JUNE_2024))

    key = f"{pensioner['id']}/2024/6.PNG"
    assert photo_key(pensioner["id"], 2024, 6, "proof.PNG") == key
    assert storage.exists(key)
    assert (storage.root / key).read_bytes() == b"\x89PNG"
    assert certificate["certificate_photo_url"] == f"http://testserver/media/{key}"


def test_duplicate_is_detected_before_upload(service, pensioner, form, storage):
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    photo = PhotoUpload(filename="late.jpg", content=b"jpg")

    with pytest.raises(CertificateAlreadySubmitted):
        asyncio.run(service.submit(pensioner, form, photo, now=JUNE_2024))
    assert not storage.exists(f"{pensioner['id']}/2024/6.jpg")


def test_history_only_contains_own_certificates(service, pensioner, other_pensioner, form):
    asyncio.run(service.submit(pensioner, form, now=datetime(2024, 5, 2)))
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    asyncio.run(service.submit(other_pensioner, form, now=JUNE_2024))

    history = asyncio.run(service.history(pensioner["id"]))

    assert [c["month"] for c in history] == [6, 5]
    assert all(c["user_id"] == pensioner["id"] for c in history)


def test_review_sets_status_notes_reviewer_and_timestamp(service, pensioner, admin, form, cert_repo):
    certificate, _ = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))

    asyncio.run(service.review(certificate["id"], admin, "approved", "Verified by phone"))

    stored = asyncio.run(cert_repo.get_by_id(certificate["id"]))
    assert stored["status"] == "approved"
    assert stored["admin_notes"] == "Verified by phone"
    assert stored["reviewed_by"] == admin["id"]
    assert stored["reviewed_at"] is not None


def test_rereview_overwrites_previous_decision(service, pensioner, admin, form):
    certificate, _ = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    asyncio.run(service.review(certificate["id"], admin, "approved", "ok"))

    updated = asyncio.run(service.review(certificate["id"], admin, "rejected", "witness unreachable"))

    assert updated["status"] == "rejected"
    assert updated["admin_notes"] == "witness unreachable"


def test_review_with_stale_expected_status_conflicts(service, pensioner, admin, form, cert_repo):
    certificate, _ = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    asyncio.run(service.review(certificate["id"], admin, "approved", "first"))

    with pytest.raises(ReviewConflict):
        asyncio.run(service.review(
            certificate["id"], admin, "rejected", "second", expected_status="pending"
        ))

    stored = asyncio.run(cert_repo.get_by_id(certificate["id"]))
    assert stored["status"] == "approved"
    assert stored["admin_notes"] == "first"


def test_review_unknown_certificate(service, admin):
    with pytest.raises(CertificateNotFound):
        asyncio.run(service.review(uuid.uuid4(), admin, "approved", ""))


def test_review_rejects_pending_as_target(service, pensioner, admin, form):
    certificate, _ = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    with pytest.raises(ValueError):
        asyncio.run(service.review(certificate["id"], admin, "pending", ""))


def test_overview_joins_pensioners_and_counts(service, pensioner, other_pensioner, admin, form):
    first, _ = asyncio.run(service.submit(pensioner, form, now=JUNE_2024))
    asyncio.run(service.submit(other_pensioner, form, now=JUNE_2024))
    asyncio.run(service.review(first["id"], admin, "approved", ""))

    overview = asyncio.run(service.overview())

    assert overview["stats"] == {
        "total_pensioners": 2,
        "total_certificates": 2,
        "pending_certificates": 1,
        "approved_certificates": 1,
    }
    assert [p["email"] for p in overview["pensioners"]] == ["other@example.com", "pensioner@example.com"]
    row = next(r for r in overview["certificates"] if r["id"] == first["id"])
    assert row["pensioner_name"] == "Maria Lopez"
    assert row["pension_number"] == "PN-10000001"


@pytest.mark.parametrize("field", ["witness_name", "witness_phone", "witness_relationship"])
def test_blank_witness_fields_are_rejected(field):
    values = {"witness_name": "Jane Doe", "witness_phone": "+1-555-0199", "witness_relationship": "Neighbor"}
    values[field] = "   "
    with pytest.raises(ValidationError):
        CertificateSubmit(**values)


def test_witness_fields_are_stripped():
    form = CertificateSubmit(witness_name="  Jane Doe ", witness_phone=" 555 ", witness_relationship="Friend ")
    assert (form.witness_name, form.witness_phone, form.witness_relationship) == ("Jane Doe", "555", "Friend")


class SpareConnection:
    """Answers the pensioner listing from the fake user repository."""

    def __init__(self, user_repo):
        self.user_repo = user_repo

    async def fetch(self, sql, role):
        return await self.user_repo.list_by_role(role)


class SinglePool:
    def __init__(self, conn=None):
        self.conn = conn
        self.acquired = 0
        self.released = 0

    async def acquire(self, timeout=None):
        if self.conn is None:
            raise asyncio.TimeoutError()
        self.acquired += 1
        return self.conn

    async def release(self, conn):
        self.released += 1


def test_overview_borrows_and_returns_a_spare_connection(cert_repo, user_repo, pensioner, form):
    pool = SinglePool(SpareConnection(user_repo))
    service = CertificateService(cert_repo, user_repo, pool=pool)
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))

    overview = asyncio.run(service.overview())

    assert (pool.acquired, pool.released) == (1, 1)
    assert overview["stats"]["total_pensioners"] == 1
    assert overview["certificates"][0]["pensioner_name"] == "Maria Lopez"


def test_overview_falls_back_when_pool_is_exhausted(cert_repo, user_repo, pensioner, form):
    pool = SinglePool()
    service = CertificateService(cert_repo, user_repo, pool=pool)
    asyncio.run(service.submit(pensioner, form, now=JUNE_2024))

    overview = asyncio.run(service.overview())

    assert pool.released == 0
    assert overview["stats"] == {
        "total_pensioners": 1,
        "total_certificates": 1,
        "pending_certificates": 1,
        "approved_certificates": 0,
    }


def test_pensioners_lists_only_pensioners(service, pensioner, admin):
    assert [p["id"] for p in asyncio.run(service.pensioners())] == [pensioner["id"]]
