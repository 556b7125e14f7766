import enum

from sqlalchemy import Column, String, Date, DateTime, Enum, Text, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from lifecert.db.base import Base


class UserRole(str, enum.Enum):
    PENSIONER = "pensioner"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    email = Column(String(120), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    pension_number = Column(String(50), unique=True, nullable=True, doc="Empty for admins")
    phone_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    role = Column(
        Enum(UserRole, name="userrole", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.PENSIONER,
        server_default=UserRole.PENSIONER.value,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    certificates = relationship(
        "LifeCertificate",
        foreign_keys="[LifeCertificate.user_id]",
        back_populates="owner",
    )
