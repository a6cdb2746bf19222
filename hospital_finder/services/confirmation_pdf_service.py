"""PDF rendering for emergency bed booking confirmations."""
from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from hospital_finder.db.models.booking import Booking
from hospital_finder.db.models.hospital import Hospital
from hospital_finder.schemas.booking_schema import ConfirmationDocumentData

PAGE_MARGIN = 40

IMPORTANT_NOTES = [
    "1. Please keep this confirmation for your records.",
    "2. Contact the hospital at the above number to confirm your arrival.",
    "3. Bring a valid ID and insurance documents if applicable.",
    "4. In case of emergency, call the hospital emergency number immediately.",
]

FOOTER_TEXT = (
    "Your booking has been successfully confirmed! A bed has been reserved for you "
    "at the hospital. Please contact the hospital at the emergency number above to "
    "confirm your arrival time."
)


def confirmation_id_for(booking_id: str) -> str:
    return booking_id.replace("-", "").upper()[:12]


def confirmation_filename(booking_id: str) -> str:
    return f"booking-confirmation-{booking_id}.pdf"


def _long_date(value: Optional[datetime]) -> str:
    if value is None:
        return "N/A"
    return f"{value.day} {value.strftime('%B %Y')}"


def build_document_data(booking: Booking, hospital: Hospital) -> ConfirmationDocumentData:
    return ConfirmationDocumentData(
        booking_id=booking.booking_id,
        confirmation_id=confirmation_id_for(booking.booking_id),
        confirmation_date=booking.confirmation_date,
        patient_name=booking.patient_name,
        patient_age=booking.patient_age,
        patient_gender=booking.patient_gender,
        contact_phone=booking.contact_phone,
        contact_email=booking.contact_email,
        emergency_type=booking.emergency_type,
        medical_condition=booking.medical_condition,
        hospital_name=hospital.name,
        hospital_address=hospital.address,
        hospital_city=hospital.district,
        hospital_phone=hospital.contact_number,
        hospital_email=hospital.email,
    )


class ConfirmationPdfService:
    def __init__(self) -> None:
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "ConfirmationTitle",
            parent=styles["Title"],
            fontName="Helvetica-Bold",
            fontSize=24,
            leading=28,
            spaceAfter=4,
        )
        self.subtitle_style = ParagraphStyle(
            "ConfirmationSubtitle",
            parent=styles["Normal"],
            fontSize=14,
            leading=18,
            alignment=TA_CENTER,
        )
        self.section_style = ParagraphStyle(
            "ConfirmationSection",
            parent=styles["Heading4"],
            fontName="Helvetica-Bold",
            fontSize=12,
            spaceBefore=10,
            spaceAfter=4,
        )
        self.body_style = ParagraphStyle("ConfirmationBody", parent=styles["Normal"], fontSize=10, leading=13)
        self.note_style = ParagraphStyle("ConfirmationNote", parent=self.body_style, fontSize=9, leading=12)
        self.footer_style = ParagraphStyle(
            "ConfirmationFooter",
            parent=styles["Normal"],
            fontSize=8,
            leading=10,
            alignment=TA_CENTER,
        )

    def _section(self, title: str, lines: List[str], style: ParagraphStyle | None = None) -> list:
        elements = [Paragraph(f"<u>{escape(title)}</u>", self.section_style)]
        for line in lines:
            elements.append(Paragraph(escape(line), style or self.body_style))
        return elements

    def _rule(self) -> HRFlowable:
        return HRFlowable(width="100%", thickness=1, color=colors.black, spaceBefore=8, spaceAfter=8)

    def render(self, data: ConfirmationDocumentData, generated_at: Optional[datetime] = None) -> bytes:
        generated_at = generated_at or datetime.now(timezone.utc)
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=f"Booking Confirmation {data.confirmation_id}",
            leftMargin=PAGE_MARGIN,
            rightMargin=PAGE_MARGIN,
            topMargin=PAGE_MARGIN,
            bottomMargin=PAGE_MARGIN,
        )

        elements = [
            Paragraph("EMERGENCY BED BOOKING", self.title_style),
            Paragraph("CONFIRMATION FORM", self.subtitle_style),
            self._rule(),
        ]
        elements += self._section(
            "BOOKING CONFIRMATION",
            [
                f"Confirmation Date: {_long_date(data.confirmation_date)}",
                f"Confirmation ID: {data.confirmation_id}",
                f"Booking ID: {data.booking_id}",
            ],
        )
        elements += self._section(
            "HOSPITAL INFORMATION",
            [
                f"Hospital Name: {data.hospital_name}",
                f"Address: {data.hospital_address}",
                f"City/District: {data.hospital_city}",
                f"Emergency Contact: {data.hospital_phone}",
                f"Email: {data.hospital_email}",
            ],
        )
        elements += self._section(
            "PATIENT INFORMATION",
            [
                f"Patient Name: {data.patient_name}",
                f"Age: {data.patient_age} years",
                f"Gender: {data.patient_gender}",
                f"Contact Phone: {data.contact_phone}",
                f"Email: {data.contact_email or 'N/A'}",
            ],
        )
        elements += self._section(
            "MEDICAL INFORMATION",
            [
                f"Emergency Type: {data.emergency_type}",
                f"Medical Condition: {data.medical_condition}",
            ],
        )
        elements += self._section("IMPORTANT NOTES", IMPORTANT_NOTES, self.note_style)
        elements += [
            self._rule(),
            Paragraph(escape(FOOTER_TEXT), self.footer_style),
            Spacer(1, 6),
            Paragraph(
                f"Generated on: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}",
                self.footer_style,
            ),
        ]

        doc.build(elements)
        return buffer.getvalue()


def get_confirmation_pdf_service() -> ConfirmationPdfService:
    return ConfirmationPdfService()
