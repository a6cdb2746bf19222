from hospital_finder.db.models.hospital import Hospital
from hospital_finder.db.models.booking import Booking, BookingStatusEnum, GenderEnum

__all__ = [
    "Hospital",
    "Booking",
    "BookingStatusEnum",
    "GenderEnum",
]
