from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.db.session import get_db_session
from hospital_finder.exceptions import ValidationError
from hospital_finder.schemas.hospital_schema import (
    HospitalResponse,
    HospitalSearchFilters,
    HospitalStatsResponse,
    NearbyHospitalResponse,
)
from hospital_finder.schemas.import_schema import ImportResponse
from hospital_finder.services.hospital_service import get_hospital_service
from hospital_finder.services.import_service import get_import_service
from hospital_finder.utils.logger import get_logger

router = APIRouter(prefix="/hospitals", tags=["hospitals"])
logger = get_logger(__name__)


def _optional_int(value: Optional[str], name: str) -> Optional[int]:
    """Blank query values count as absent."""
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValidationError(f"{name}: must be a whole number, got {value!r}") from None


# Static paths are declared before "/{hospital_id}" so they are not captured as ids.


@router.get("", response_model=List[HospitalResponse])
async def list_hospitals(
    session: AsyncSession = Depends(get_db_session),
) -> List[HospitalResponse]:
    """Every hospital in the directory, unpaginated."""
    hospitals = await get_hospital_service().list_hospitals(session)
    return [HospitalResponse.from_hospital(h) for h in hospitals]


@router.get("/nearby", response_model=List[NearbyHospitalResponse])
async def nearby_hospitals(
    lat: Optional[float] = Query(None, description="Latitude of the reference point"),
    lng: Optional[float] = Query(None, description="Longitude of the reference point"),
    radius: Optional[float] = Query(None, description="Search radius in kilometers (default 50)"),
    session: AsyncSession = Depends(get_db_session),
) -> List[NearbyHospitalResponse]:
    """
    Hospitals within `radius` km of (`lat`, `lng`), nearest first.

    Examples:
    - GET /hospitals/nearby?lat=12.97&lng=77.59
    - GET /hospitals/nearby?lat=12.97&lng=77.59&radius=10
    """
    matches = await get_hospital_service().find_nearby(session, lat, lng, radius)
    return [
        NearbyHospitalResponse.from_hospital(hospital, distance_km=round(distance, 3))
        for hospital, distance in matches
    ]


@router.get("/search", response_model=List[HospitalResponse])
async def search_hospitals(
    state: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    specialty: Optional[str] = Query(None),
    min_available_beds: Optional[str] = Query(None, alias="minAvailableBeds"),
    search_text: Optional[str] = Query(None, alias="searchText"),
    session: AsyncSession = Depends(get_db_session),
) -> List[HospitalResponse]:
    """
    Case-insensitive substring search; all given filters must match.

    `searchText` matches name, address, district, state or specialties.
    """
    filters = HospitalSearchFilters(
        state=state,
        district=district,
        name=name,
        category=category,
        specialty=specialty,
        min_available_beds=_optional_int(min_available_beds, "minAvailableBeds"),
        search_text=search_text,
    )
    hospitals = await get_hospital_service().search_hospitals(session, filters)
    return [HospitalResponse.from_hospital(h) for h in hospitals]


@router.get("/stats", response_model=HospitalStatsResponse)
async def hospital_stats(
    session: AsyncSession = Depends(get_db_session),
) -> HospitalStatsResponse:
    return await get_hospital_service().get_stats(session)


@router.post("/upload", response_model=ImportResponse)
async def upload_hospitals(
    file: Optional[UploadFile] = File(None),
    session: AsyncSession = Depends(get_db_session),
) -> ImportResponse:
    """Import hospitals from a spreadsheet (.xlsx) or CSV upload, one row per hospital."""
    if file is None:
        raise ValidationError("Attach the spreadsheet as the 'file' form field", error="No file uploaded")

    content = await file.read()
    logger.info("hospitals.upload", filename=file.filename, size=len(content))
    summary = await get_import_service().import_file(
        session,
        content,
        filename=file.filename,
        content_type=file.content_type,
    )
    return ImportResponse(**summary.model_dump())


@router.get("/{hospital_id}", response_model=HospitalResponse)
async def get_hospital(
    hospital_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> HospitalResponse:
    """Get hospital by ID."""
    hospital = await get_hospital_service().get_hospital(session, hospital_id)
    return HospitalResponse.from_hospital(hospital)
