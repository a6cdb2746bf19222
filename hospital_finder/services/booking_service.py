from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.db.models.booking import (
    Booking,
    BookingStatusEnum,
    generate_confirmation_token,
)
from hospital_finder.db.models.hospital import Hospital
from hospital_finder.exceptions import (
    CapacityError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from hospital_finder.schemas.booking_schema import BookingCreate
from hospital_finder.services.confirmation_pdf_service import (
    ConfirmationPdfService,
    build_document_data,
    get_confirmation_pdf_service,
)
from hospital_finder.utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = (
    ("hospital_id", "hospitalId"),
    ("patient_name", "patientName"),
    ("patient_age", "patientAge"),
    ("patient_gender", "patientGender"),
    ("contact_phone", "contactPhone"),
)

PENDING = BookingStatusEnum.PENDING.value
CONFIRMED = BookingStatusEnum.CONFIRMED.value
CANCELLED = BookingStatusEnum.CANCELLED.value


def _blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class BookingService:
    """Booking lifecycle: pending -> confirmed | cancelled.

    Confirming takes one bed from the hospital; cancelling a confirmed
    booking gives it back. The booking and hospital writes of each
    transition are committed together, and the bed counter only moves
    through conditional updates that keep it within [0, total_beds].
    """

    def __init__(self, pdf_service: Optional[ConfirmationPdfService] = None) -> None:
        self.pdf_service = pdf_service or get_confirmation_pdf_service()

    async def create_booking(self, session: AsyncSession, data: BookingCreate) -> Booking:
        missing = [alias for field, alias in REQUIRED_FIELDS if _blank(getattr(data, field))]
        if missing:
            logger.warning("booking.create_failed", reason="missing_fields", fields=missing)
            raise ValidationError(
                f"All required fields must be provided (missing: {', '.join(missing)})"
            )

        hospital = await session.get(Hospital, data.hospital_id)
        if hospital is None:
            raise NotFoundError(
                f"No hospital found with ID: {data.hospital_id}",
                error="Hospital not found",
            )

        booking = Booking(
            hospital_id=hospital.hospital_id,
            patient_name=data.patient_name.strip(),
            patient_age=data.patient_age,
            patient_gender=data.patient_gender.value,
            contact_phone=data.contact_phone.strip(),
            contact_email=data.contact_email or None,
            emergency_type=data.emergency_type or "",
            medical_condition=data.medical_condition or "",
            status=PENDING,
            confirmation_token=generate_confirmation_token(),
            hospital_name=hospital.name,
            hospital_contact=hospital.contact_number,
        )
        session.add(booking)
        await session.commit()

        logger.info(
            "booking.created",
            booking_id=booking.booking_id,
            hospital_id=hospital.hospital_id,
        )
        return booking

    async def get_booking(self, session: AsyncSession, booking_id: str) -> Booking:
        booking = await session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError(
                f"No booking found with ID: {booking_id}",
                error="Booking not found",
            )
        return booking

    async def get_booking_with_hospital(
        self,
        session: AsyncSession,
        booking_id: str,
    ) -> Tuple[Booking, Optional[Hospital]]:
        booking = await self.get_booking(session, booking_id)
        hospital = await session.get(Hospital, booking.hospital_id)
        return booking, hospital

    async def _get_linked_hospital(self, session: AsyncSession, booking: Booking) -> Hospital:
        hospital = await session.get(Hospital, booking.hospital_id)
        if hospital is None:
            raise NotFoundError("Associated hospital not found", error="Hospital not found")
        return hospital

    async def confirm_booking(
        self,
        session: AsyncSession,
        booking_id: str,
    ) -> Tuple[Booking, Hospital]:
        """Confirm a pending booking and take one bed from its hospital."""
        booking = await self.get_booking(session, booking_id)

        if booking.status == CONFIRMED:
            raise ConflictError("This booking is already confirmed")
        if booking.status == CANCELLED:
            raise ConflictError("Cancelled bookings cannot be confirmed")

        hospital = await self._get_linked_hospital(session, booking)
        if hospital.available_beds <= 0:
            raise CapacityError("No emergency beds are currently available at this hospital")

        claimed = await session.execute(
            update(Booking)
            .where(Booking.booking_id == booking.booking_id, Booking.status == PENDING)
            .values(status=CONFIRMED, confirmation_date=datetime.now(timezone.utc))
        )
        if claimed.rowcount != 1:
            await session.rollback()
            raise ConflictError("This booking is no longer pending")

        # Guarded decrement: a concurrent confirm that took the last bed makes this a no-op
        taken = await session.execute(
            update(Hospital)
            .where(Hospital.hospital_id == hospital.hospital_id, Hospital.available_beds > 0)
            .values(available_beds=Hospital.available_beds - 1)
        )
        if taken.rowcount != 1:
            await session.rollback()
            raise CapacityError("No emergency beds are currently available at this hospital")

        await session.commit()
        await session.refresh(booking)
        await session.refresh(hospital)

        logger.info(
            "booking.confirmed",
            booking_id=booking.booking_id,
            hospital_id=hospital.hospital_id,
            available_beds=hospital.available_beds,
        )
        return booking, hospital

    async def cancel_booking(self, session: AsyncSession, booking_id: str) -> str:
        """Cancel a booking; a confirmed one gives its bed back."""
        booking = await self.get_booking(session, booking_id)

        previous_status = booking.status
        if previous_status == CANCELLED:
            raise ConflictError("This booking is already cancelled")

        cancelled = await session.execute(
            update(Booking)
            .where(Booking.booking_id == booking.booking_id, Booking.status == previous_status)
            .values(status=CANCELLED)
        )
        if cancelled.rowcount != 1:
            await session.rollback()
            raise ConflictError("This booking was modified by another request")

        if previous_status == CONFIRMED:
            restored = await session.execute(
                update(Hospital)
                .where(
                    Hospital.hospital_id == booking.hospital_id,
                    Hospital.available_beds < Hospital.total_beds,
                )
                .values(available_beds=Hospital.available_beds + 1)
            )
            if restored.rowcount != 1:
                logger.warning(
                    "booking.bed_not_restored",
                    booking_id=booking.booking_id,
                    hospital_id=booking.hospital_id,
                )

        await session.commit()
        await session.refresh(booking)

        logger.info(
            "booking.cancelled",
            booking_id=booking.booking_id,
            previous_status=previous_status,
        )
        return booking.booking_id

    async def build_confirmation_document(self, session: AsyncSession, booking_id: str) -> bytes:
        booking = await self.get_booking(session, booking_id)
        if booking.status != CONFIRMED:
            raise StateError("Only confirmed bookings can download confirmation forms")

        hospital = await self._get_linked_hospital(session, booking)
        pdf = self.pdf_service.render(build_document_data(booking, hospital))

        logger.info("booking.confirmation_rendered", booking_id=booking.booking_id, size=len(pdf))
        return pdf


_booking_service: Optional[BookingService] = None


def get_booking_service() -> BookingService:
    global _booking_service
    if _booking_service is None:
        _booking_service = BookingService()
    return _booking_service
