"""
Walk-in booking workflow.

Submission re-checks the ID-proof gate on the server, stores ID images,
prices the stay from the room's current tariff and then runs three writes as a
saga:

    1. claim the room (available -> occupied) with one conditional update
    2. insert the booking (status checked_in)
    3. insert the guests

If 2 or 3 fails, the writes already made are undone and the room is released,
so a failed booking never leaves a room marked occupied.
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from frontdesk.config.database import Collections
from frontdesk.database.db_operations import db_ops
from frontdesk.models.booking import BookingCreate
from frontdesk.models.guest import GuestLookupResult, GuestPayload
from frontdesk.models.registration import (
    GuestIdentity,
    ReturningVerifiedGuest,
    compute_tariff,
    identity_from_lookup,
    satisfies_id_gate,
)
from frontdesk.services.guest_lookup import lookup_cache, lookup_guest_by_phone
from frontdesk.services.storage import (
    decode_data_url,
    extension_for,
    is_data_url,
    object_path,
    storage,
)
from frontdesk.utils.helpers import normalize_phone, to_utc_naive

logger = logging.getLogger(__name__)

class RoomNotFoundError(ValueError):
    pass

class RoomUnavailableError(ValueError):
    def __init__(self, room_number: str):
        super().__init__(f"Room {room_number} is no longer available")
        self.room_number = room_number

class IdentificationRequiredError(ValueError):
    def __init__(self, missing: List[str]):
        super().__init__(
            "Government ID proof (front and back) is mandatory for police verification. "
            f"Missing: {', '.join(missing)}"
        )
        self.missing = missing

def _missing_id_fields(guest: GuestPayload) -> List[str]:
    missing = []
    if not guest.id_proof_type:
        missing.append("id_proof_type")
    if not guest.id_front_image:
        missing.append("id_front_image")
    if not guest.id_back_image:
        missing.append("id_back_image")
    return missing

async def _store_image(value: Optional[str], correlation_id: str, guest_id: str, side: str) -> Optional[str]:
    """Upload inline image data; stored references pass through untouched.

    Upload failures keep the inline data as the reference so the booking can
    still go ahead.
    """
    if not is_data_url(value):
        return value
    try:
        data, mime = decode_data_url(value)
        path = object_path(correlation_id, guest_id, side, extension_for(mime))
        return await storage.upload(data, path)
    except Exception as e:
        logger.error("Error uploading %s image for guest %s: %s", side, guest_id, e)
        return value

async def _prepare_guest(
    guest: GuestPayload,
    correlation_id: str,
    identity: Optional[GuestIdentity],
    history: GuestLookupResult,
    now: datetime,
) -> Dict:
    guest_id = str(uuid.uuid4())
    id_proof_type = guest.id_proof_type

    if guest.is_primary and isinstance(identity, ReturningVerifiedGuest):
        # Previously verified ID on file; nothing new is uploaded
        front, back = identity.id_front_image, identity.id_back_image
        id_proof_type = id_proof_type or identity.id_proof_type
    else:
        front = await _store_image(guest.id_front_image, correlation_id, guest_id, "front")
        back = await _store_image(guest.id_back_image, correlation_id, guest_id, "back")

    phone_number = normalize_phone(guest.phone_number or guest.phone) or None
    return {
        "guest_ref": guest_id,
        "full_name": guest.full_name,
        "phone": guest.phone,
        "phone_number": phone_number,
        "email": guest.email,
        "address": guest.address,
        "is_primary": guest.is_primary,
        "id_proof_type": id_proof_type,
        "id_proof_number": guest.id_proof_number,
        "id_front_image": front,
        "id_back_image": back,
        "id_verified": bool(front) and bool(back) and bool(id_proof_type),
        "first_stay_at": history.first_stay_at or now,
        "last_stay_at": now,
    }

async def _release(room_id: str, booking_id: Optional[str], correlation_id: str) -> None:
    """Compensating writes for a booking that could not be completed"""
    try:
        if booking_id:
            await db_ops.delete_many(Collections.GUESTS, {"booking_id": booking_id})
            await db_ops.delete(Collections.BOOKINGS, booking_id)
        await db_ops.update(Collections.ROOMS, room_id, {"status": "available"}, extra_filter={"status": "occupied"})
        await storage.delete_prefix(correlation_id)
    except Exception as e:
        logger.critical(
            "Rollback failed for room %s (booking %s): %s", room_id, booking_id, e
        )

async def resolve_primary_identity(primary: GuestPayload) -> Tuple[GuestLookupResult, GuestIdentity]:
    lookup = await lookup_guest_by_phone(primary.phone_number or primary.phone, use_cache=False)
    return lookup, identity_from_lookup(lookup)

async def create_booking(payload: BookingCreate, created_by: Optional[str] = None) -> Dict:
    """Check a guest party into a room. Returns the stored booking with its guests."""
    room = await db_ops.get_by_id(Collections.ROOMS, payload.room_id)
    if not room:
        raise RoomNotFoundError("Room not found")
    if room.get("status") != "available":
        raise RoomUnavailableError(room.get("room_number", payload.room_id))

    now = datetime.utcnow()
    expected_checkout = to_utc_naive(payload.expected_checkout)
    if expected_checkout <= now:
        raise ValueError("Expected departure must be after check-in")

    primary = next(g for g in payload.guests if g.is_primary)
    lookup, identity = await resolve_primary_identity(primary)
    if not satisfies_id_gate(primary, identity):
        raise IdentificationRequiredError(_missing_id_fields(primary))

    correlation_id = str(uuid.uuid4())
    guest_docs = []
    for guest in payload.guests:
        if guest.is_primary:
            history = lookup
        else:
            history = await lookup_guest_by_phone(guest.phone_number or guest.phone)
        guest_docs.append(await _prepare_guest(guest, correlation_id, identity, history, now))

    base_price = float(room.get("base_price", 0))
    ac_charge = float(room.get("ac_charge", 0)) if payload.has_ac else 0.0
    geyser_charge = float(room.get("geyser_charge", 0)) if payload.has_geyser else 0.0
    booking_doc = {
        "room_id": payload.room_id,
        "check_in": now,
        "expected_checkout": expected_checkout,
        "check_out": None,
        "has_ac": payload.has_ac,
        "has_geyser": payload.has_geyser,
        "base_price": base_price,
        "ac_charge": ac_charge,
        "geyser_charge": geyser_charge,
        "total_amount": compute_tariff(
            room.get("base_price", 0), room.get("ac_charge", 0), room.get("geyser_charge", 0),
            payload.has_ac, payload.has_geyser,
        ),
        "advance_paid": payload.advance_paid,
        "extra_charges": 0.0,
        "status": "checked_in",
        "notes": payload.notes,
        "created_by": created_by,
        "correlation_id": correlation_id,
    }

    claimed = await db_ops.update(
        Collections.ROOMS, payload.room_id, {"status": "occupied"}, extra_filter={"status": "available"}
    )
    if not claimed:
        await storage.delete_prefix(correlation_id)
        raise RoomUnavailableError(room.get("room_number", payload.room_id))

    booking_id = None
    try:
        booking = await db_ops.create(Collections.BOOKINGS, booking_doc)
        booking_id = str(booking["_id"])
        for doc in guest_docs:
            doc["booking_id"] = booking_id
        guests = await db_ops.create_many(Collections.GUESTS, guest_docs)
    except Exception as e:
        logger.error("Booking for room %s failed, rolling back: %s", room.get("room_number"), e)
        await _release(payload.room_id, booking_id, correlation_id)
        raise

    for doc in guest_docs:
        if doc["phone_number"]:
            lookup_cache.invalidate(doc["phone_number"])

    logger.info(
        "Checked in %s to room %s (booking %s, total %.2f)",
        primary.full_name, room.get("room_number"), booking_id, booking_doc["total_amount"],
    )
    booking["room"] = claimed
    booking["guests"] = guests
    return booking
