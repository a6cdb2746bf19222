from __future__ import annotations

from typing import Optional

import pytest

from hospital_finder.db.models.booking import Booking
from hospital_finder.db.models.hospital import Hospital
from hospital_finder.exceptions import (
    CapacityError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from hospital_finder.schemas.booking_schema import BookingCreate
from hospital_finder.services.booking_service import BookingService


@pytest.fixture()
def service():
    return BookingService()


def _create(hospital_id: Optional[str], **overrides) -> BookingCreate:
    values = dict(
        hospital_id=hospital_id,
        patient_name="Ravi Kumar",
        patient_age=35,
        patient_gender="Male",
        contact_phone="9000000001",
    )
    values.update(overrides)
    return BookingCreate(**values)


async def _beds(session_factory, hospital_id: str) -> int:
    async with session_factory() as session:
        return (await session.get(Hospital, hospital_id)).available_beds


async def _status(session_factory, booking_id: str) -> str:
    async with session_factory() as session:
        return (await session.get(Booking, booking_id)).status


async def test_create_snapshots_hospital_and_starts_pending(service, session, make_hospital):
    hospital = await make_hospital(name="Lakeside Hospital", emergency_num="", telephone="080-555")

    booking = await service.create_booking(session, _create(hospital.hospital_id))

    assert booking.status == "pending"
    assert booking.hospital_name == "Lakeside Hospital"
    # Falls back to the general line when there is no emergency number
    assert booking.hospital_contact == "080-555"
    assert len(booking.confirmation_token) == 32
    assert booking.emergency_type == ""
    assert booking.confirmation_date is None


async def test_create_issues_distinct_tokens(service, session, make_hospital):
    hospital = await make_hospital()
    first = await service.create_booking(session, _create(hospital.hospital_id))
    second = await service.create_booking(session, _create(hospital.hospital_id))
    assert first.confirmation_token != second.confirmation_token


@pytest.mark.parametrize(
    "missing",
    ["hospital_id", "patient_name", "patient_age", "patient_gender", "contact_phone"],
)
async def test_create_requires_fields(service, session, make_hospital, missing):
    hospital = await make_hospital()
    data = _create(**{"hospital_id": hospital.hospital_id, missing: None})

    with pytest.raises(ValidationError):
        await service.create_booking(session, data)


async def test_create_treats_blank_name_as_missing(service, session, make_hospital):
    hospital = await make_hospital()
    with pytest.raises(ValidationError):
        await service.create_booking(session, _create(hospital.hospital_id, patient_name="   "))


async def test_create_unknown_hospital(service, session):
    with pytest.raises(NotFoundError):
        await service.create_booking(session, _create("does-not-exist"))


async def test_confirm_takes_one_bed(service, session, session_factory, make_hospital):
    hospital = await make_hospital(available_beds=3)
    booking = await service.create_booking(session, _create(hospital.hospital_id))

    confirmed, updated_hospital = await service.confirm_booking(session, booking.booking_id)

    assert confirmed.status == "confirmed"
    assert confirmed.confirmation_date is not None
    assert updated_hospital.available_beds == 2
    assert await _beds(session_factory, hospital.hospital_id) == 2


async def test_single_bed_scenario(service, session, session_factory, make_hospital):
    hospital = await make_hospital(total_beds=1, available_beds=1)
    first = await service.create_booking(session, _create(hospital.hospital_id))
    second = await service.create_booking(session, _create(hospital.hospital_id, patient_name="Meena"))

    await service.confirm_booking(session, first.booking_id)
    assert await _beds(session_factory, hospital.hospital_id) == 0

    with pytest.raises(ConflictError):
        await service.confirm_booking(session, first.booking_id)

    with pytest.raises(CapacityError):
        await service.confirm_booking(session, second.booking_id)

    assert await _status(session_factory, second.booking_id) == "pending"
    assert await _beds(session_factory, hospital.hospital_id) == 0


async def test_confirm_never_succeeds_without_beds(service, session, session_factory, make_hospital):
    hospital = await make_hospital(total_beds=10, available_beds=0)
    booking = await service.create_booking(session, _create(hospital.hospital_id))

    with pytest.raises(CapacityError):
        await service.confirm_booking(session, booking.booking_id)

    assert await _status(session_factory, booking.booking_id) == "pending"
    assert await _beds(session_factory, hospital.hospital_id) == 0


async def test_confirm_missing_booking(service, session):
    with pytest.raises(NotFoundError):
        await service.confirm_booking(session, "missing")


async def test_confirm_rejects_cancelled_booking(service, session, session_factory, make_hospital):
    hospital = await make_hospital(available_beds=4)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await service.cancel_booking(session, booking.booking_id)

    with pytest.raises(ConflictError):
        await service.confirm_booking(session, booking.booking_id)

    assert await _beds(session_factory, hospital.hospital_id) == 4


async def test_cancel_pending_leaves_beds_alone(service, session, session_factory, make_hospital):
    hospital = await make_hospital(available_beds=4)
    booking = await service.create_booking(session, _create(hospital.hospital_id))

    cancelled_id = await service.cancel_booking(session, booking.booking_id)

    assert cancelled_id == booking.booking_id
    assert await _status(session_factory, booking.booking_id) == "cancelled"
    assert await _beds(session_factory, hospital.hospital_id) == 4


async def test_cancel_confirmed_returns_bed(service, session, session_factory, make_hospital):
    hospital = await make_hospital(total_beds=10, available_beds=4)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await service.confirm_booking(session, booking.booking_id)
    assert await _beds(session_factory, hospital.hospital_id) == 3

    await service.cancel_booking(session, booking.booking_id)

    assert await _status(session_factory, booking.booking_id) == "cancelled"
    assert await _beds(session_factory, hospital.hospital_id) == 4


async def test_cancel_never_restores_past_total(service, session, session_factory, make_hospital):
    hospital = await make_hospital(total_beds=2, available_beds=2)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await service.confirm_booking(session, booking.booking_id)

    # Inventory refilled out of band while the booking was confirmed
    async with session_factory() as other:
        stored = await other.get(Hospital, hospital.hospital_id)
        stored.available_beds = 2
        await other.commit()

    await service.cancel_booking(session, booking.booking_id)
    assert await _beds(session_factory, hospital.hospital_id) == 2


async def test_cancel_twice_conflicts(service, session, make_hospital):
    hospital = await make_hospital()
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await service.cancel_booking(session, booking.booking_id)

    with pytest.raises(ConflictError):
        await service.cancel_booking(session, booking.booking_id)


async def test_cancel_missing_booking(service, session):
    with pytest.raises(NotFoundError):
        await service.cancel_booking(session, "missing")


async def test_confirmation_document_requires_confirmed(service, session, make_hospital):
    hospital = await make_hospital()
    booking = await service.create_booking(session, _create(hospital.hospital_id))

    with pytest.raises(StateError):
        await service.build_confirmation_document(session, booking.booking_id)


async def test_confirmation_document_for_confirmed_booking(service, session, make_hospital):
    hospital = await make_hospital(name="St. Mary's & Co <Trust>")
    booking = await service.create_booking(
        session,
        _create(hospital.hospital_id, medical_condition="Fracture <left arm>"),
    )
    await service.confirm_booking(session, booking.booking_id)

    pdf = await service.build_confirmation_document(session, booking.booking_id)

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


async def test_confirmation_document_missing_booking(service, session):
    with pytest.raises(NotFoundError):
        await service.build_confirmation_document(session, "missing")


async def _load(session, booking_id: str, hospital_id: str) -> None:
    # Pull both rows into the session's identity map so later reads are stale
    await session.get(Booking, booking_id)
    await session.get(Hospital, hospital_id)


async def test_confirm_loses_last_bed_to_concurrent_confirm(
    service, session, session_factory, make_hospital
):
    hospital = await make_hospital(total_beds=1, available_beds=1)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    rival = await service.create_booking(session, _create(hospital.hospital_id, patient_name="Meena"))
    await _load(session, booking.booking_id, hospital.hospital_id)

    async with session_factory() as other:
        await service.confirm_booking(other, rival.booking_id)

    with pytest.raises(CapacityError):
        await service.confirm_booking(session, booking.booking_id)

    assert await _status(session_factory, booking.booking_id) == "pending"
    assert await _status(session_factory, rival.booking_id) == "confirmed"
    assert await _beds(session_factory, hospital.hospital_id) == 0


async def test_confirm_conflicts_when_cancelled_concurrently(
    service, session, session_factory, make_hospital
):
    hospital = await make_hospital(available_beds=3)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await _load(session, booking.booking_id, hospital.hospital_id)

    async with session_factory() as other:
        await service.cancel_booking(other, booking.booking_id)

    booking_id = booking.booking_id
    hospital_id = hospital.hospital_id
    with pytest.raises(ConflictError):
        await service.confirm_booking(session, booking_id)

    assert await _status(session_factory, booking_id) == "cancelled"
    assert await _beds(session_factory, hospital_id) == 3


async def test_cancel_conflicts_when_confirmed_concurrently(
    service, session, session_factory, make_hospital
):
    hospital = await make_hospital(total_beds=10, available_beds=3)
    booking = await service.create_booking(session, _create(hospital.hospital_id))
    await _load(session, booking.booking_id, hospital.hospital_id)

    async with session_factory() as other:
        await service.confirm_booking(other, booking.booking_id)

    booking_id = booking.booking_id
    hospital_id = hospital.hospital_id
    with pytest.raises(ConflictError):
        await service.cancel_booking(session, booking_id)

    assert await _status(session_factory, booking_id) == "confirmed"
    assert await _beds(session_factory, hospital_id) == 2
