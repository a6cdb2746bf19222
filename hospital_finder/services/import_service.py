from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.db.models.hospital import Hospital
from hospital_finder.exceptions import ValidationError
from hospital_finder.schemas.import_schema import ImportSummary
from hospital_finder.utils.logger import get_logger
from hospital_finder.utils.tabular import UnreadableTableError, read_table

logger = get_logger(__name__)

DEFAULT_HOSPITAL_NAME = "Unknown Hospital"
DEFAULT_CATEGORY = "General"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        # Spreadsheets hand back pincodes and phone numbers as floats
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _int(value: Any) -> int:
    try:
        return int(float(_text(value)))
    except (ValueError, OverflowError):
        return 0


def _coordinate(value: str, limit: float) -> float:
    try:
        number = float(value)
    except ValueError:
        return 0.0
    if not math.isfinite(number) or abs(number) > limit:
        return 0.0
    return number


def parse_coordinates(value: Any) -> Tuple[float, float]:
    """Parse "lat,lng" text into a (longitude, latitude) pair, (0, 0) when unusable."""
    parts = [part.strip() for part in _text(value).split(",")]
    if len(parts) < 2:
        return 0.0, 0.0
    latitude = _coordinate(parts[0], 90)
    longitude = _coordinate(parts[1], 180)
    return longitude, latitude


def parse_list(value: Any) -> List[str]:
    return [item.strip() for item in _text(value).split(",") if item.strip()]


def hospital_from_row(row: Mapping[str, Any]) -> Hospital:
    """Map one row of the hospital directory export onto a Hospital."""
    longitude, latitude = parse_coordinates(row.get("Location_Coordinates"))

    total_beds = max(_int(row.get("Total_Num_Beds")), 0)
    available_beds = max(_int(row.get("Available_Beds")), 0)
    if available_beds > total_beds:
        logger.warning(
            "import.beds_clamped",
            sr_no=_text(row.get("Sr_No")),
            total_beds=total_beds,
            available_beds=available_beds,
        )
        available_beds = total_beds

    return Hospital(
        sr_no=_text(row.get("Sr_No")),
        name=_text(row.get("Hospital_Name")) or DEFAULT_HOSPITAL_NAME,
        category=_text(row.get("Hospital_Category")) or DEFAULT_CATEGORY,
        discipline=_text(row.get("Discipline_Systems_of_Medicine")),
        address=_text(row.get("Address_Original_First_Line")),
        state=_text(row.get("State")),
        district=_text(row.get("District")),
        pincode=_text(row.get("Pincode")),
        telephone=_text(row.get("Telephone")),
        emergency_num=_text(row.get("Emergency_Num")),
        bloodbank_phone=_text(row.get("Bloodbank_Phone_No")),
        email=_text(row.get("Hospital_Primary_Email_Id")),
        website=_text(row.get("Website")),
        specialties=parse_list(row.get("Specialties")),
        facilities=parse_list(row.get("Facilities")),
        accreditation=_text(row.get("Accreditation")),
        ayush=_text(row.get("Ayush")),
        total_beds=total_beds,
        available_beds=available_beds,
        private_wards=max(_int(row.get("Number_Private_Wards")), 0),
        longitude=longitude,
        latitude=latitude,
        location_coordinates=_text(row.get("Location_Coordinates")),
        dormentry=_text(row.get("Dormentry")),
    )


class ImportService:
    """Bulk import of hospital directory rows.

    Each row is inserted and committed on its own; a row that fails to map
    or insert is rolled back and counted, and the rest of the batch goes on.
    Rows are always inserted, never matched against existing records.
    """

    async def import_file(
        self,
        session: AsyncSession,
        content: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> ImportSummary:
        try:
            rows = read_table(content, filename=filename, content_type=content_type)
        except UnreadableTableError as exc:
            logger.warning("import.unreadable", filename=filename, error=str(exc))
            raise ValidationError(str(exc)) from exc

        logger.info("import.start", filename=filename, rows=len(rows))
        return await self.import_rows(session, rows)

    async def import_rows(
        self,
        session: AsyncSession,
        rows: Iterable[Mapping[str, Any]],
    ) -> ImportSummary:
        summary = ImportSummary()
        for index, row in enumerate(rows, start=1):
            summary.total += 1
            try:
                session.add(hospital_from_row(row))
                await session.commit()
            except Exception as exc:
                await session.rollback()
                summary.failed += 1
                logger.warning("import.row_failed", row=index, error=str(exc))
                continue
            summary.imported += 1

        logger.info(
            "import.completed",
            imported=summary.imported,
            failed=summary.failed,
            total=summary.total,
        )
        return summary


def get_import_service() -> ImportService:
    return ImportService()
