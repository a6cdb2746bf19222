from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hospital_finder.db.models.booking import GenderEnum
from hospital_finder.schemas.common import CamelModel
from hospital_finder.schemas.hospital_schema import HospitalResponse


class BookingCreate(CamelModel):
    """Booking request body.

    Required fields are declared optional here so that a missing value is
    reported by the booking service as a single validation error instead of
    one framework error per field.
    """
    hospital_id: Optional[str] = None
    patient_name: Optional[str] = Field(None, max_length=255)
    patient_age: Optional[int] = Field(None, gt=0, le=150)
    patient_gender: Optional[GenderEnum] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    contact_email: Optional[str] = Field(None, max_length=255)
    emergency_type: Optional[str] = Field(None, max_length=255)
    medical_condition: Optional[str] = None


class BookingSummary(CamelModel):
    id: str
    confirmation_token: str
    patient_name: str
    hospital_name: str
    status: str


class BookingCreatedResponse(CamelModel):
    message: str = "Booking created successfully"
    booking: BookingSummary


class BookingConfirmation(CamelModel):
    id: str
    patient_name: str
    hospital_name: str
    status: str
    confirmation_date: Optional[datetime]
    available_beds_after: int


class BookingConfirmedResponse(CamelModel):
    message: str = "Booking confirmed successfully"
    booking: BookingConfirmation


class BookingCancelledResponse(CamelModel):
    message: str = "Booking cancelled successfully"
    booking_id: str


class BookingDetailResponse(CamelModel):
    """Full booking record with the live hospital it points to."""
    id: str
    hospital_id: str
    patient_name: str
    patient_age: int
    patient_gender: str
    contact_phone: str
    contact_email: Optional[str]
    emergency_type: str
    medical_condition: str
    status: str
    booking_date: Optional[datetime]
    confirmation_date: Optional[datetime]
    confirmation_token: str
    hospital_name: str
    hospital_contact: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    hospital: Optional[HospitalResponse] = None


class ConfirmationDocumentData(CamelModel):
    """Everything printed on the confirmation PDF, already resolved."""
    booking_id: str
    confirmation_id: str
    confirmation_date: Optional[datetime]
    patient_name: str
    patient_age: int
    patient_gender: str
    contact_phone: str
    contact_email: Optional[str]
    emergency_type: str
    medical_condition: str
    hospital_name: str
    hospital_address: str
    hospital_city: str
    hospital_phone: str
    hospital_email: str
