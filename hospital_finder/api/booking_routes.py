from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.db.session import get_db_session
from hospital_finder.schemas.booking_schema import (
    BookingCancelledResponse,
    BookingConfirmation,
    BookingConfirmedResponse,
    BookingCreate,
    BookingCreatedResponse,
    BookingDetailResponse,
    BookingSummary,
)
from hospital_finder.schemas.hospital_schema import HospitalResponse
from hospital_finder.services.booking_service import get_booking_service
from hospital_finder.services.confirmation_pdf_service import confirmation_filename

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    session: AsyncSession = Depends(get_db_session),
) -> BookingCreatedResponse:
    """Create a pending emergency bed booking."""
    booking = await get_booking_service().create_booking(session, data)
    return BookingCreatedResponse(
        booking=BookingSummary(
            id=booking.booking_id,
            confirmation_token=booking.confirmation_token,
            patient_name=booking.patient_name,
            hospital_name=booking.hospital_name,
            status=booking.status,
        )
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> BookingDetailResponse:
    booking, hospital = await get_booking_service().get_booking_with_hospital(session, booking_id)
    return BookingDetailResponse(
        id=booking.booking_id,
        hospital_id=booking.hospital_id,
        patient_name=booking.patient_name,
        patient_age=booking.patient_age,
        patient_gender=booking.patient_gender,
        contact_phone=booking.contact_phone,
        contact_email=booking.contact_email,
        emergency_type=booking.emergency_type,
        medical_condition=booking.medical_condition,
        status=booking.status,
        booking_date=booking.booking_date,
        confirmation_date=booking.confirmation_date,
        confirmation_token=booking.confirmation_token,
        hospital_name=booking.hospital_name,
        hospital_contact=booking.hospital_contact,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        hospital=HospitalResponse.from_hospital(hospital) if hospital else None,
    )


@router.post("/{booking_id}/confirm", response_model=BookingConfirmedResponse)
async def confirm_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> BookingConfirmedResponse:
    """Confirm a pending booking; takes one available bed from the hospital."""
    booking, hospital = await get_booking_service().confirm_booking(session, booking_id)
    return BookingConfirmedResponse(
        booking=BookingConfirmation(
            id=booking.booking_id,
            patient_name=booking.patient_name,
            hospital_name=hospital.name,
            status=booking.status,
            confirmation_date=booking.confirmation_date,
            available_beds_after=hospital.available_beds,
        )
    )


@router.post("/{booking_id}/cancel", response_model=BookingCancelledResponse)
async def cancel_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> BookingCancelledResponse:
    """Cancel a booking; a confirmed booking returns its bed to the hospital."""
    cancelled_id = await get_booking_service().cancel_booking(session, booking_id)
    return BookingCancelledResponse(booking_id=cancelled_id)


@router.get(
    "/{booking_id}/download-confirmation",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_confirmation(
    booking_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    """Confirmation form PDF for a confirmed booking."""
    pdf = await get_booking_service().build_confirmation_document(session, booking_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{confirmation_filename(booking_id)}"'},
    )
