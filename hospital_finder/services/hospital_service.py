from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import String, column, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.config.settings import get_settings
from hospital_finder.db.models.hospital import Hospital
from hospital_finder.exceptions import NotFoundError, ValidationError
from hospital_finder.schemas.hospital_schema import (
    CategoryCount,
    HospitalSearchFilters,
    HospitalStatsResponse,
    StateCount,
)
from hospital_finder.utils.geo import bounding_box, haversine_km
from hospital_finder.utils.logger import get_logger

logger = get_logger(__name__)


def _given(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _specialty_matches(dialect_name: str, value: str):
    """True when any single element of the specialties list contains value."""
    if dialect_name == "postgresql":
        elements = func.json_array_elements_text(Hospital.specialties)
    else:
        elements = func.json_each(Hospital.specialties)
    elements = elements.table_valued(column("value", String))
    return (
        select(elements.c.value)
        .where(elements.c.value.icontains(value, autoescape=True))
        .exists()
    )


class HospitalService:
    """Read-side queries over the hospital directory."""

    async def list_hospitals(self, session: AsyncSession) -> List[Hospital]:
        return list((await session.scalars(select(Hospital).order_by(Hospital.name))).all())

    async def get_hospital(self, session: AsyncSession, hospital_id: str) -> Hospital:
        hospital = await session.get(Hospital, hospital_id)
        if hospital is None:
            raise NotFoundError(
                f"No hospital found with ID: {hospital_id}",
                error="Hospital not found",
            )
        return hospital

    async def find_nearby(
        self,
        session: AsyncSession,
        latitude: Optional[float],
        longitude: Optional[float],
        radius_km: Optional[float] = None,
    ) -> List[Tuple[Hospital, float]]:
        """Hospitals within radius_km of the point, nearest first, with their distance."""
        if latitude is None or longitude is None:
            raise ValidationError(
                "Please provide lat and lng query parameters",
                error="Latitude and longitude are required",
            )
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationError("lat must be within [-90, 90] and lng within [-180, 180]")
        if radius_km is None:
            radius_km = get_settings().default_search_radius_km
        if radius_km <= 0:
            raise ValidationError("radius must be a positive number of kilometers")

        box = bounding_box(latitude, longitude, radius_km)
        query = select(Hospital).where(Hospital.latitude.between(box.min_lat, box.max_lat))
        if box.lng_range is not None:
            query = query.where(Hospital.longitude.between(*box.lng_range))

        candidates = (await session.scalars(query)).all()
        matches = []
        for hospital in candidates:
            distance = haversine_km(latitude, longitude, hospital.latitude, hospital.longitude)
            if distance <= radius_km:
                matches.append((hospital, distance))
        matches.sort(key=lambda item: item[1])

        logger.info(
            "hospitals.nearby",
            lat=latitude,
            lng=longitude,
            radius_km=radius_km,
            candidates=len(candidates),
            matches=len(matches),
        )
        return matches

    async def search_hospitals(
        self,
        session: AsyncSession,
        filters: HospitalSearchFilters,
    ) -> List[Hospital]:
        query = select(Hospital)
        dialect_name = session.get_bind().dialect.name

        field_filters = (
            (Hospital.state, filters.state),
            (Hospital.district, filters.district),
            (Hospital.name, filters.name),
            (Hospital.category, filters.category),
        )
        for field, value in field_filters:
            value = _given(value)
            if value is not None:
                query = query.where(field.icontains(value, autoescape=True))

        specialty = _given(filters.specialty)
        if specialty is not None:
            query = query.where(_specialty_matches(dialect_name, specialty))

        if filters.min_available_beds is not None:
            query = query.where(Hospital.available_beds >= filters.min_available_beds)

        search_text = _given(filters.search_text)
        if search_text is not None:
            query = query.where(
                or_(
                    Hospital.name.icontains(search_text, autoescape=True),
                    Hospital.address.icontains(search_text, autoescape=True),
                    Hospital.district.icontains(search_text, autoescape=True),
                    Hospital.state.icontains(search_text, autoescape=True),
                    _specialty_matches(dialect_name, search_text),
                )
            )

        hospitals = (await session.scalars(query.order_by(Hospital.name))).all()
        logger.info(
            "hospitals.search",
            filters=filters.model_dump(exclude_none=True),
            results=len(hospitals),
        )
        return list(hospitals)

    async def get_stats(self, session: AsyncSession) -> HospitalStatsResponse:
        total_hospitals = await session.scalar(select(func.count()).select_from(Hospital)) or 0
        total_beds, available_beds = (
            await session.execute(
                select(
                    func.coalesce(func.sum(Hospital.total_beds), 0),
                    func.coalesce(func.sum(Hospital.available_beds), 0),
                )
            )
        ).one()

        count = func.count().label("count")
        by_category = (
            await session.execute(
                select(Hospital.category, count)
                .group_by(Hospital.category)
                .order_by(desc("count"), Hospital.category)
            )
        ).all()
        by_state = (
            await session.execute(
                select(Hospital.state, count)
                .group_by(Hospital.state)
                .order_by(desc("count"), Hospital.state)
            )
        ).all()

        return HospitalStatsResponse(
            total_hospitals=total_hospitals,
            total_beds=int(total_beds),
            available_beds=int(available_beds),
            by_category=[CategoryCount(category=row[0], count=row[1]) for row in by_category],
            by_state=[StateCount(state=row[0], count=row[1]) for row in by_state],
        )


_hospital_service: Optional[HospitalService] = None


def get_hospital_service() -> HospitalService:
    global _hospital_service
    if _hospital_service is None:
        _hospital_service = HospitalService()
    return _hospital_service
