# lifecert/schemas/certificate_schema.py

from datetime import datetime
from typing import Annotated, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, StringConstraints, computed_field

from lifecert.core.badges import status_badge, status_label
from lifecert.core.utils import period_label
from lifecert.schemas.user_schema import UserOut

WitnessText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
WitnessPhone = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]

ReviewStatus = Literal["approved", "rejected", "needs_review"]


class BadgeOut(BaseModel):
    color: str
    icon: str


class CertificateSubmit(BaseModel):
    """Witness attestation; values are stripped and must not be blank."""
    witness_name: WitnessText
    witness_phone: WitnessPhone
    witness_relationship: WitnessText


class PhotoUpload(BaseModel):
    filename: str
    content: bytes
    content_type: Optional[str] = None


class CertificateOut(BaseModel):
    """A certificate row plus the display fields the dashboards render."""
    id: UUID
    user_id: UUID
    submission_date: datetime
    month: int
    year: int
    witness_name: str
    witness_phone: str
    witness_relationship: str
    certificate_photo_url: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

    @computed_field
    @property
    def period_label(self) -> str:
        return period_label(self.month, self.year)

    @computed_field
    @property
    def status_label(self) -> str:
        return status_label(self.status)

    @computed_field
    @property
    def badge(self) -> BadgeOut:
        return BadgeOut(**status_badge(self.status)._asdict())

    @computed_field
    @property
    def short_id(self) -> str:
        return str(self.id)[:8]


class SubmissionResult(BaseModel):
    certificate: CertificateOut
    message: str


class AdminCertificateRow(CertificateOut):
    pensioner_name: Optional[str] = None
    pension_number: Optional[str] = None


class OverviewStats(BaseModel):
    total_pensioners: int
    total_certificates: int
    pending_certificates: int
    approved_certificates: int


class AdminOverview(BaseModel):
    stats: OverviewStats
    certificates: list[AdminCertificateRow]
    pensioners: list[UserOut]


class CertificateDetail(BaseModel):
    certificate: CertificateOut
    pensioner: Optional[UserOut] = None


class ReviewIn(BaseModel):
    status: ReviewStatus
    admin_notes: str = ""
    expected_status: Optional[Literal["pending", "approved", "rejected", "needs_review"]] = None


class ReviewResult(BaseModel):
    certificate: CertificateOut
    overview: AdminOverview
