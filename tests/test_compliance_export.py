import csv
import io
from datetime import date, datetime

import pytest
import pyzipper

from conftest import PNG_BYTES, PNG_DATA_URL
from frontdesk.config.database import Collections
from frontdesk.database.db_operations import db_ops
from frontdesk.models.compliance import ExportRequest
from frontdesk.services import compliance_export, export_renderers
from frontdesk.services.compliance_export import (
    IncompleteIdentificationError,
    NoRecordsSelectedError,
    build_record,
)
from frontdesk.services.export_renderers import IMAGE_UNAVAILABLE
from frontdesk.services.storage import storage

DAY = date(2026, 10, 19)
# 10:00 lodge time
CHECK_IN = datetime(2026, 10, 19, 4, 30)


async def add_booking(room_number="101", front="b/g/front.png", back="b/g/back.png", name="Ravi Kumar", extra_guests=0):
    room = await db_ops.create(Collections.ROOMS, {
        "room_number": room_number, "floor": 1, "room_type": "standard",
        "base_price": 800, "ac_charge": 200, "geyser_charge": 100, "status": "occupied",
    })
    booking = await db_ops.create(Collections.BOOKINGS, {
        "room_id": str(room["_id"]),
        "check_in": CHECK_IN,
        "expected_checkout": datetime(2026, 10, 20, 5, 30),
        "check_out": None,
        "total_amount": 1100,
        "advance_paid": 0,
        "status": "checked_in",
    })
    guests = [{
        "booking_id": str(booking["_id"]),
        "full_name": name,
        "phone": "9876543210",
        "is_primary": True,
        "id_proof_type": "driving_license",
        "id_proof_number": "TS0920260001",
        "address": "Hyderabad",
        "id_front_image": front,
        "id_back_image": back,
    }]
    guests += [
        {"booking_id": str(booking["_id"]), "full_name": f"Companion {i}", "is_primary": False}
        for i in range(extra_guests)
    ]
    await db_ops.create_many(Collections.GUESTS, guests)
    return str(booking["_id"])


def request(booking_ids, export_format, **overrides):
    return ExportRequest(start_date=DAY, end_date=DAY, booking_ids=booking_ids, format=export_format, **overrides)


def test_record_defaults():
    record = build_record({
        "_id": "abc",
        "check_in": CHECK_IN,
        "expected_checkout": datetime(2026, 10, 20, 5, 30),
        "guests": [{"full_name": "Ravi", "is_primary": True, "id_proof_type": "voter_id"}],
    })
    assert record.room_number == "N/A"
    assert record.phone == "N/A"
    assert record.id_number == "N/A"
    assert record.id_type == "VOTER ID"
    assert record.check_out == datetime(2026, 10, 20, 5, 30)
    assert not record.has_complete_id
    assert build_record({"_id": "x", "check_in": CHECK_IN, "expected_checkout": CHECK_IN, "guests": []}) is None


async def test_records_in_range_include_companion_count():
    await add_booking(extra_guests=2)
    records = await compliance_export.records_in_range(DAY, DAY)
    assert len(records) == 1
    assert records[0].room_number == "101"
    assert records[0].id_type == "DRIVING LICENSE"
    assert records[0].additional_guests == 2
    assert await compliance_export.records_in_range(date(2026, 10, 20), date(2026, 10, 21)) == []


async def test_incomplete_selection_blocks_detailed_export(monkeypatch):
    complete = await add_booking()
    incomplete = await add_booking(room_number="102", back=None)
    calls = []
    monkeypatch.setattr(export_renderers, "render_detailed_pdf", lambda *a, **kw: calls.append(a) or b"")

    with pytest.raises(IncompleteIdentificationError) as exc:
        await compliance_export.export(request([complete, incomplete], "detailed"))

    assert str(exc.value) == "1 booking(s) are missing identification documents"
    assert exc.value.incomplete == [incomplete]
    assert calls == []


async def test_archive_is_gated_too():
    incomplete = await add_booking(front=None)
    with pytest.raises(IncompleteIdentificationError):
        await compliance_export.export(request([incomplete], "archive"))


async def test_empty_selection_is_rejected():
    await add_booking()
    with pytest.raises(NoRecordsSelectedError):
        await compliance_export.export(request([], "tabular"))
    with pytest.raises(NoRecordsSelectedError):
        await compliance_export.export(request(["not-in-range"], "tabular"))


async def test_tabular_report_skips_the_image_gate():
    booking_id = await add_booking(front=None, back=None)
    result = await compliance_export.export(request([booking_id], "tabular"), generated_at=datetime(2026, 10, 19, 6, 0))
    assert result.filename == "Police_Report_2026-10-19.pdf"
    assert result.media_type == "application/pdf"
    assert result.content.startswith(b"%PDF")


async def test_csv_report():
    booking_id = await add_booking(extra_guests=1)
    result = await compliance_export.export(request([booking_id], "csv"), generated_at=datetime(2026, 10, 19, 6, 0))

    assert result.filename == "Guest_Report_2026-10-19.csv"
    rows = list(csv.reader(io.StringIO(result.content.decode("utf-8"))))
    assert rows[0] == export_renderers.CSV_HEADERS
    assert rows[1] == [
        "1", "101", "Ravi Kumar", "9876543210", "DRIVING LICENSE", "TS0920260001", "Hyderabad",
        "19/10/2026", "10:00", "20/10/2026", "11:00", "1",
    ]


async def test_detailed_register_degrades_missing_images():
    await storage.upload(PNG_BYTES, "b/g/front.png")
    booking_id = await add_booking()
    result = await compliance_export.export(request([booking_id], "detailed"))
    assert result.filename.startswith("Guest_Register_")
    assert result.content.startswith(b"%PDF")


async def test_archive_contains_images_and_placeholders():
    await storage.upload(PNG_BYTES, "b/g/front.png")
    booking_id = await add_booking()

    result = await compliance_export.export(request([booking_id], "archive"))

    assert result.media_type == "application/zip"
    with pyzipper.AESZipFile(io.BytesIO(result.content)) as archive:
        names = archive.namelist()
        stem = f"Room_101/Ravi_Kumar_{booking_id[-6:]}"
        assert f"{stem}_front.png" in names
        assert f"{stem}_back_unavailable.txt" in names
        assert archive.read(f"{stem}_front.png") == PNG_BYTES
        assert archive.read(f"{stem}_back_unavailable.txt").decode() == IMAGE_UNAVAILABLE


async def test_archive_with_password_is_encrypted():
    await storage.upload(PNG_BYTES, "b/g/front.png")
    await storage.upload(PNG_BYTES, "b/g/back.png")
    booking_id = await add_booking()

    result = await compliance_export.export(request([booking_id], "archive", password="station-42"))

    with pyzipper.AESZipFile(io.BytesIO(result.content)) as archive:
        name = archive.namelist()[0]
        with pytest.raises(RuntimeError):
            archive.read(name)
        archive.setpassword(b"station-42")
        assert archive.read(name) == PNG_BYTES


async def test_inline_images_are_decoded():
    assert await compliance_export.fetch_image(PNG_DATA_URL) == PNG_BYTES
    assert await compliance_export.fetch_image("missing/path.png") is None
    assert await compliance_export.fetch_image(None) is None


def test_export_request_rejects_reversed_range():
    with pytest.raises(ValueError):
        ExportRequest(start_date=date(2026, 10, 20), end_date=date(2026, 10, 19))
