"""
Police verification export.

Builds one record per booking (its primary guest) for the selected date
range, enforces that image-bearing exports only go out when every record has
both ID images, fetches the images one record at a time and hands everything
to the renderers.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import httpx

from frontdesk.models.compliance import ExportRequest, GuestRecord, GuestRecordSummary
from frontdesk.services import export_renderers
from frontdesk.services.booking_queries import bookings_checked_in_between
from frontdesk.services.storage import StorageError, decode_data_url, is_data_url, storage
from frontdesk.utils.helpers import local_day_bounds

logger = logging.getLogger(__name__)

# Formats that carry ID image payloads (or stand in for them) and so may only be
# produced for a complete selection
GATED_FORMATS = ("detailed", "archive")

IMAGE_FETCH_TIMEOUT = 15.0

class NoRecordsSelectedError(ValueError):
    def __init__(self):
        super().__init__("No records selected. Please select at least one guest record to export.")

class IncompleteIdentificationError(ValueError):
    def __init__(self, incomplete: List[str]):
        super().__init__(f"{len(incomplete)} booking(s) are missing identification documents")
        self.incomplete = incomplete

@dataclass
class ExportFile:
    filename: str
    media_type: str
    content: bytes

def humanize_id_type(id_proof_type: Optional[str]) -> str:
    if not id_proof_type:
        return "N/A"
    return id_proof_type.replace("_", " ").upper()

def build_record(booking: Dict) -> Optional[GuestRecord]:
    """Flatten a booking to its primary guest, or None when it has none"""
    guests = booking.get("guests") or []
    primary = next((g for g in guests if g.get("is_primary")), None)
    if primary is None:
        return None
    room = booking.get("room") or {}
    return GuestRecord(
        booking_id=str(booking["_id"]),
        room_number=room.get("room_number") or "N/A",
        check_in=booking["check_in"],
        check_out=booking.get("check_out") or booking["expected_checkout"],
        guest_name=primary.get("full_name") or "N/A",
        phone=primary.get("phone") or "N/A",
        id_type=humanize_id_type(primary.get("id_proof_type")),
        id_number=primary.get("id_proof_number") or "N/A",
        address=primary.get("address"),
        id_front_image=primary.get("id_front_image"),
        id_back_image=primary.get("id_back_image"),
        additional_guests=max(len(guests), 1) - 1,
    )

async def records_in_range(start_date: date, end_date: date) -> List[GuestRecord]:
    start, end = local_day_bounds(start_date, end_date)
    bookings = await bookings_checked_in_between(start, end)
    records = [build_record(b) for b in bookings]
    return [r for r in records if r is not None]

def summarize(record: GuestRecord) -> GuestRecordSummary:
    return GuestRecordSummary(
        booking_id=record.booking_id,
        room_number=record.room_number,
        check_in=record.check_in,
        check_out=record.check_out,
        guest_name=record.guest_name,
        phone=record.phone,
        id_type=record.id_type,
        id_number=record.id_number,
        has_id_front=bool(record.id_front_image),
        has_id_back=bool(record.id_back_image),
        additional_guests=record.additional_guests,
    )

def ensure_complete(records: List[GuestRecord]) -> None:
    """Refuse partial regulatory submissions"""
    incomplete = [r.booking_id for r in records if not r.has_complete_id]
    if incomplete:
        raise IncompleteIdentificationError(incomplete)

async def fetch_image(reference: Optional[str]) -> Optional[bytes]:
    """Raw bytes for a stored image reference, or None if it cannot be read"""
    if not reference:
        return None
    try:
        if is_data_url(reference):
            return decode_data_url(reference)[0]
        if reference.startswith(("http://", "https://")):
            async with httpx.AsyncClient(timeout=IMAGE_FETCH_TIMEOUT) as client:
                response = await client.get(reference)
                response.raise_for_status()
                return response.content
        return await storage.download(reference)
    except (StorageError, ValueError, httpx.HTTPError, OSError) as e:
        logger.warning("ID image unavailable (%s): %s", reference[:80], e)
        return None

async def fetch_record_images(records: List[GuestRecord]) -> Dict[str, Tuple[Optional[bytes], Optional[bytes]]]:
    images = {}
    # One record at a time keeps memory bounded and the document order stable
    for record in records:
        front = await fetch_image(record.id_front_image)
        back = await fetch_image(record.id_back_image)
        images[record.booking_id] = (front, back)
    return images

async def select_records(request: ExportRequest) -> List[GuestRecord]:
    if not request.booking_ids:
        raise NoRecordsSelectedError()
    selected = set(request.booking_ids)
    records = [r for r in await records_in_range(request.start_date, request.end_date) if r.booking_id in selected]
    if not records:
        raise NoRecordsSelectedError()
    return records

async def export(request: ExportRequest, generated_at: Optional[datetime] = None) -> ExportFile:
    """Produce the requested compliance document; raises before any output is built"""
    records = await select_records(request)
    if request.format in GATED_FORMATS:
        ensure_complete(records)

    generated_at = generated_at or datetime.utcnow()
    stamp = generated_at.strftime("%Y-%m-%d")

    if request.format == "tabular":
        content = export_renderers.render_tabular_pdf(records, request.start_date, request.end_date, generated_at)
        return ExportFile(f"Police_Report_{stamp}.pdf", "application/pdf", content)

    if request.format == "csv":
        content = export_renderers.render_csv(records).encode("utf-8")
        return ExportFile(f"Guest_Report_{stamp}.csv", "text/csv; charset=utf-8", content)

    images = await fetch_record_images(records) if (request.format == "archive" or request.include_images) else None

    if request.format == "detailed":
        content = export_renderers.render_detailed_pdf(
            records, request.start_date, request.end_date, generated_at, images=images
        )
        return ExportFile(f"Guest_Register_{stamp}.pdf", "application/pdf", content)

    content = export_renderers.render_archive(records, images, password=request.password)
    logger.info(
        "Built ID proof archive for %d record(s)%s", len(records), " (encrypted)" if request.password else ""
    )
    return ExportFile(f"ID_Proofs_{stamp}.zip", "application/zip", content)
