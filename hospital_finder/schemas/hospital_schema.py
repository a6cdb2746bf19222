from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from hospital_finder.db.models.hospital import Hospital
from hospital_finder.schemas.common import CamelModel


class GeoPoint(CamelModel):
    """GeoJSON point, coordinates in [longitude, latitude] order."""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)


class HospitalResponse(CamelModel):
    """Schema for hospital response."""
    id: str
    sr_no: str
    name: str
    category: str
    discipline: str
    address: str
    state: str
    district: str
    pincode: str
    telephone: str
    emergency_num: str
    bloodbank_phone: str
    email: str
    website: str
    specialties: List[str]
    facilities: List[str]
    accreditation: str
    ayush: str
    total_beds: int
    available_beds: int
    private_wards: int
    location: GeoPoint
    location_coordinates: str
    dormentry: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_hospital(cls, hospital: Hospital, **extra) -> "HospitalResponse":
        return cls(
            id=hospital.hospital_id,
            sr_no=hospital.sr_no,
            name=hospital.name,
            category=hospital.category,
            discipline=hospital.discipline,
            address=hospital.address,
            state=hospital.state,
            district=hospital.district,
            pincode=hospital.pincode,
            telephone=hospital.telephone,
            emergency_num=hospital.emergency_num,
            bloodbank_phone=hospital.bloodbank_phone,
            email=hospital.email,
            website=hospital.website,
            specialties=list(hospital.specialties or []),
            facilities=list(hospital.facilities or []),
            accreditation=hospital.accreditation,
            ayush=hospital.ayush,
            total_beds=hospital.total_beds,
            available_beds=hospital.available_beds,
            private_wards=hospital.private_wards,
            location=GeoPoint(coordinates=[hospital.longitude, hospital.latitude]),
            location_coordinates=hospital.location_coordinates,
            dormentry=hospital.dormentry,
            created_at=hospital.created_at,
            updated_at=hospital.updated_at,
            **extra,
        )


class NearbyHospitalResponse(HospitalResponse):
    distance_km: float


class HospitalSearchFilters(CamelModel):
    """Optional catalog filters; blank strings count as absent."""
    state: Optional[str] = None
    district: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    specialty: Optional[str] = None
    min_available_beds: Optional[int] = None
    search_text: Optional[str] = None


class CategoryCount(CamelModel):
    category: Optional[str]
    count: int


class StateCount(CamelModel):
    state: Optional[str]
    count: int


class HospitalStatsResponse(CamelModel):
    total_hospitals: int
    total_beds: int
    available_beds: int
    by_category: List[CategoryCount]
    by_state: List[StateCount]
