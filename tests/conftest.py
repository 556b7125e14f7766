from __future__ import annotations

import os
import tempfile
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_PORT", "5432")
os.environ.setdefault("DB_NAME", "lifecert_test")
os.environ.setdefault("DB_USER", "lifecert")
os.environ.setdefault("DB_PASS", "lifecert")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="lifecert-media-"))

from fastapi.testclient import TestClient

from lifecert.api.v1.deps import get_certificate_repo, get_storage, get_token_repo, get_user_repo
from lifecert.core.security import create_access_token, hash_password
from lifecert.main import app
from lifecert.repositories.certificate_repo import DuplicateCertificateError
from lifecert.services.storage import LocalStorage

PASSWORD = "secret123"


class FakeUserRepository:
    def __init__(self):
        self.rows: dict[uuid.UUID, dict] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def add(self, **fields) -> dict:
        self._clock += timedelta(seconds=1)
        row = {
            "id": uuid.uuid4(),
            "email": fields["email"],
            "hashed_password": fields.get("hashed_password") or hash_password(PASSWORD),
            "full_name": fields.get("full_name", "Test User"),
            "pension_number": fields.get("pension_number"),
            "phone_number": fields.get("phone_number"),
            "address": fields.get("address"),
            "date_of_birth": fields.get("date_of_birth"),
            "role": fields.get("role", "pensioner"),
            "created_at": self._clock,
        }
        self.rows[row["id"]] = row
        return dict(row)

    async def get_by_email(self, email):
        for row in self.rows.values():
            if row["email"].lower() == email.lower():
                return dict(row)
        return None

    async def get_by_id(self, user_id):
        row = self.rows.get(user_id)
        return dict(row) if row else None

    async def get_by_pension_number(self, pension_number):
        for row in self.rows.values():
            if row["pension_number"] == pension_number:
                return dict(row)
        return None

    async def list_by_role(self, role):
        rows = [dict(r) for r in self.rows.values() if r["role"] == role]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    async def create(self, user_in):
        return self.add(**user_in)


class FakeCertificateRepository:
    def __init__(self):
        self.rows: dict[uuid.UUID, dict] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.skip_period_lookup = False

    async def get_by_id(self, certificate_id):
        row = self.rows.get(certificate_id)
        return dict(row) if row else None

    async def get_for_period(self, user_id, month, year):
        if self.skip_period_lookup:
            return None
        for row in self.rows.values():
            if (row["user_id"], row["month"], row["year"]) == (user_id, month, year):
                return dict(row)
        return None

    async def list_by_user(self, user_id):
        rows = [dict(r) for r in self.rows.values() if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    async def list_all(self):
        return sorted((dict(r) for r in self.rows.values()), key=lambda r: r["created_at"], reverse=True)

    async def create(self, user_id, month, year, witness_name, witness_phone,
                     witness_relationship, certificate_photo_url=None):
        for row in self.rows.values():
            if (row["user_id"], row["month"], row["year"]) == (user_id, month, year):
                raise DuplicateCertificateError("Certificate for this period already exists")
        self._clock += timedelta(seconds=1)
        row = {
            "id": uuid.uuid4(),
            "user_id": user_id,
            "submission_date": self._clock,
            "month": month,
            "year": year,
            "witness_name": witness_name,
            "witness_phone": witness_phone,
            "witness_relationship": witness_relationship,
            "certificate_photo_url": certificate_photo_url,
            "status": "pending",
            "admin_notes": None,
            "reviewed_by": None,
            "reviewed_at": None,
            "created_at": self._clock,
        }
        self.rows[row["id"]] = row
        return dict(row)

    async def update_review(self, certificate_id, status, admin_notes, reviewed_by,
                            reviewed_at, expected_status=None):
        row = self.rows.get(certificate_id)
        if row is None:
            return None
        if expected_status is not None and row["status"] != expected_status:
            return None
        row.update(status=status, admin_notes=admin_notes,
                   reviewed_by=reviewed_by, reviewed_at=reviewed_at)
        return dict(row)


class FakeTokenRepository:
    def __init__(self):
        self.revoked: dict[str, datetime] = {}

    async def revoke(self, jti, expires_at):
        self.revoked.setdefault(jti, expires_at)

    async def is_revoked(self, jti):
        return jti in self.revoked


@pytest.fixture
def user_repo():
    return FakeUserRepository()


@pytest.fixture
def cert_repo():
    return FakeCertificateRepository()


@pytest.fixture
def token_repo():
    return FakeTokenRepository()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(root=tmp_path / "media", public_url="http://testserver/media")


@pytest.fixture
def pensioner(user_repo):
    return user_repo.add(
        email="pensioner@example.com",
        full_name="Maria Lopez",
        pension_number="PN-10000001",
        phone_number="+1-555-0100",
        address="1 Main Street",
        date_of_birth=date(1950, 3, 14),
    )


@pytest.fixture
def other_pensioner(user_repo):
    return user_repo.add(
        email="other@example.com",
        full_name="John Smith",
        pension_number="PN-10000002",
    )


@pytest.fixture
def admin(user_repo):
    return user_repo.add(email="admin@example.com", full_name="Admin User", role="admin")


@pytest.fixture
def client(user_repo, cert_repo, token_repo, storage):
    app.dependency_overrides[get_user_repo] = lambda: user_repo
    app.dependency_overrides[get_certificate_repo] = lambda: cert_repo
    app.dependency_overrides[get_token_repo] = lambda: token_repo
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: dict) -> dict:
        token = create_access_token(subject=str(user["id"]))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def fixed_period(monkeypatch):
    """Pin the submission window to June 2024."""
    monkeypatch.setattr(
        "lifecert.services.certificate_service.current_period", lambda now=None: (6, 2024)
    )
    monkeypatch.setattr("lifecert.api.v1.endpoints.session.current_period", lambda now=None: (6, 2024))
    return 6, 2024
