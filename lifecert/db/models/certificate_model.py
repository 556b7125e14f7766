import enum

from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, DateTime, Enum,
    CheckConstraint, UniqueConstraint, func, text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from lifecert.db.base import Base


class CertificateStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVIEW = "needs_review"


class LifeCertificate(Base):
    __tablename__ = "life_certificates"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_life_certificates_user_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_life_certificates_month"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    submission_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    witness_name = Column(String(100), nullable=False)
    witness_phone = Column(String(20), nullable=False)
    witness_relationship = Column(String(100), nullable=False)
    certificate_photo_url = Column(String(500), nullable=True)
    status = Column(
        Enum(CertificateStatus, name="certificatestatus", values_callable=lambda e: [m.value for m in e]),
        default=CertificateStatus.PENDING,
        server_default=CertificateStatus.PENDING.value,
        nullable=False,
    )
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", foreign_keys=[user_id], back_populates="certificates")
    reviewer = relationship("User", foreign_keys=[reviewed_by])

    def __repr__(self):
        return f"<LifeCertificate(user={self.user_id}, period={self.month}/{self.year}, status={self.status})>"
