from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hospital_finder.db.base import Base


if TYPE_CHECKING:
    from hospital_finder.db.models.booking import Booking


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hospital(Base):
    """Hospital directory record with bed inventory and a geographic point."""
    __tablename__ = "hospitals"
    __table_args__ = (
        Index("ix_hospitals_location", "latitude", "longitude"),
    )

    hospital_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    sr_no: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(100), default="", nullable=False, index=True)
    discipline: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    address: Mapped[str] = mapped_column(Text, default="", nullable=False)
    state: Mapped[str] = mapped_column(String(100), default="", nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(100), default="", nullable=False, index=True)
    pincode: Mapped[str] = mapped_column(String(20), default="", nullable=False)

    telephone: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    emergency_num: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    bloodbank_phone: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    website: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    specialties: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    facilities: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    accreditation: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    ayush: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    # 0 <= available_beds <= total_beds is kept by the importer and the booking guards
    total_beds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_beds: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    private_wards: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    longitude: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    location_coordinates: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    dormentry: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="hospital")

    @property
    def contact_number(self) -> str:
        """Best phone number to reach the hospital in an emergency."""
        return self.emergency_num or self.telephone
