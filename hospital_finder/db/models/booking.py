from __future__ import annotations

import enum
import secrets
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hospital_finder.db.base import Base


class BookingStatusEnum(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class GenderEnum(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


if TYPE_CHECKING:
    from hospital_finder.db.models.hospital import Hospital


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_confirmation_token() -> str:
    return secrets.token_hex(16)


class Booking(Base):
    """Emergency bed booking - a patient's claim on one hospital's beds."""
    __tablename__ = "bookings"

    booking_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    hospital_id: Mapped[str] = mapped_column(
        ForeignKey("hospitals.hospital_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    patient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    patient_age: Mapped[int] = mapped_column(Integer, nullable=False)
    patient_gender: Mapped[str] = mapped_column(String(10), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    emergency_type: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    medical_condition: Mapped[str] = mapped_column(Text, default="", nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=BookingStatusEnum.PENDING.value,
        nullable=False,
    )
    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    confirmation_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmation_token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        default=generate_confirmation_token,
    )

    # Snapshot of the hospital at booking time
    hospital_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    hospital_contact: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    hospital: Mapped["Hospital"] = relationship("Hospital", back_populates="bookings")
