from __future__ import annotations

import io

import pytest
from openpyxl import Workbook
from sqlalchemy import select

from hospital_finder.db.models.hospital import Hospital
from hospital_finder.exceptions import ValidationError
from hospital_finder.services.import_service import (
    ImportService,
    hospital_from_row,
    parse_coordinates,
    parse_list,
)

API = "/api"

HEADER = [
    "Sr_No",
    "Hospital_Name",
    "Hospital_Category",
    "State",
    "District",
    "Pincode",
    "Specialties",
    "Total_Num_Beds",
    "Available_Beds",
    "Location_Coordinates",
]


def _csv(*rows: list[str]) -> bytes:
    lines = [",".join(HEADER)]
    for row in rows:
        lines.append(",".join(f'"{value}"' for value in row))
    return ("\n".join(lines) + "\n").encode("utf-8")


def test_row_mapping_example():
    hospital = hospital_from_row(
        {
            "Hospital_Name": "Victoria Hospital",
            "Location_Coordinates": "12.9,77.6",
            "Specialties": "Cardiology, Neurology",
        }
    )

    assert (hospital.longitude, hospital.latitude) == (77.6, 12.9)
    assert hospital.specialties == ["Cardiology", "Neurology"]


def test_row_defaults():
    hospital = hospital_from_row({})

    assert hospital.name == "Unknown Hospital"
    assert hospital.category == "General"
    assert (hospital.longitude, hospital.latitude) == (0.0, 0.0)
    assert hospital.specialties == []
    assert hospital.total_beds == 0
    assert hospital.available_beds == 0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.9,77.6", (77.6, 12.9)),
        (" 12.9 , 77.6 ", (77.6, 12.9)),
        ("12.9", (0.0, 0.0)),
        ("abc,77.6", (77.6, 0.0)),
        ("nan,inf", (0.0, 0.0)),
        ("95,200", (0.0, 0.0)),
        (None, (0.0, 0.0)),
    ],
)
def test_parse_coordinates(raw, expected):
    assert parse_coordinates(raw) == expected


def test_parse_list_drops_empty_entries():
    assert parse_list("ICU, ,Blood Bank,,  Pharmacy ") == ["ICU", "Blood Bank", "Pharmacy"]
    assert parse_list(None) == []


def test_numeric_fields_fall_back_to_zero_and_clamp():
    hospital = hospital_from_row(
        {"Total_Num_Beds": "many", "Available_Beds": "12", "Number_Private_Wards": "-3"}
    )
    assert hospital.total_beds == 0
    assert hospital.available_beds == 0
    assert hospital.private_wards == 0

    hospital = hospital_from_row({"Total_Num_Beds": "50", "Available_Beds": "80"})
    assert (hospital.total_beds, hospital.available_beds) == (50, 50)


def test_spreadsheet_numbers_become_plain_text():
    hospital = hospital_from_row({"Pincode": 560001.0, "Telephone": 8022222222.0, "Total_Num_Beds": 30.0})
    assert hospital.pincode == "560001"
    assert hospital.telephone == "8022222222"
    assert hospital.total_beds == 30


async def test_import_csv_counts_rows(session):
    content = _csv(
        ["1", "Victoria Hospital", "Public", "Karnataka", "Bengaluru", "560002",
         "Cardiology, Neurology", "100", "20", "12.9,77.6"],
        ["2", "", "", "Kerala", "Kochi", "682001", "", "bad", "", ""],
    )

    summary = await ImportService().import_file(session, content, filename="hospitals.csv")

    assert (summary.imported, summary.failed, summary.total) == (2, 0, 2)
    hospitals = (await session.scalars(select(Hospital).order_by(Hospital.sr_no))).all()
    assert hospitals[0].specialties == ["Cardiology", "Neurology"]
    assert hospitals[0].pincode == "560002"
    assert hospitals[1].name == "Unknown Hospital"
    assert hospitals[1].total_beds == 0


async def test_import_never_deduplicates(session):
    content = _csv(["7", "Same Hospital", "Public", "Goa", "Panaji", "403001", "", "5", "1", ""])
    service = ImportService()

    await service.import_file(session, content, filename="a.csv")
    await service.import_file(session, content, filename="a.csv")

    rows = (await session.scalars(select(Hospital).where(Hospital.sr_no == "7"))).all()
    assert len(rows) == 2


async def test_failing_row_is_counted_not_fatal(session):
    class Exploding(dict):
        def get(self, key, default=None):
            raise RuntimeError("corrupt row")

    rows = [{"Hospital_Name": "Good One"}, Exploding(), {"Hospital_Name": "Good Two"}]

    summary = await ImportService().import_rows(session, rows)

    assert (summary.imported, summary.failed, summary.total) == (2, 1, 3)
    names = set((await session.scalars(select(Hospital.name))).all())
    assert names == {"Good One", "Good Two"}


async def test_unreadable_file_is_a_validation_error(session):
    with pytest.raises(ValidationError):
        await ImportService().import_file(session, b"not a workbook", filename="hospitals.xlsx")

    with pytest.raises(ValidationError):
        await ImportService().import_file(session, b"", filename="hospitals.csv")


async def test_upload_endpoint_accepts_spreadsheet(client):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(HEADER)
    sheet.append([1, "Victoria Hospital", "Public", "Karnataka", "Bengaluru", 560002,
                  "Cardiology, Neurology", 100, 20, "12.9,77.6"])
    sheet.append([2, "Bowring Hospital", None, "Karnataka", "Bengaluru", None, None, None, None, None])
    buffer = io.BytesIO()
    workbook.save(buffer)

    response = await client.post(
        f"{API}/hospitals/upload",
        files={
            "file": (
                "hospitals.xlsx",
                buffer.getvalue(),
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        },
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Import completed", "imported": 2, "failed": 0, "total": 2}

    hospitals = (await client.get(f"{API}/hospitals/search", params={"name": "victoria"})).json()
    assert hospitals[0]["location"]["coordinates"] == [77.6, 12.9]
    assert hospitals[0]["pincode"] == "560002"
    assert hospitals[0]["availableBeds"] == 20


async def test_upload_endpoint_requires_file(client):
    response = await client.post(f"{API}/hospitals/upload")

    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"
