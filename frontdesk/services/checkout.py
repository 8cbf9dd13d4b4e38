"""
Checkout workflow: close an active booking and send the room to housekeeping.

The booking update and the room update are two separate writes. If the room
update fails, the booking stays checked out while the room still reads
occupied; the failure is logged and surfaced to the caller.
"""
import logging
from datetime import datetime
from typing import Dict

from frontdesk.config.database import Collections
from frontdesk.database.db_operations import db_ops

logger = logging.getLogger(__name__)

CHECKOUT_FROM = ("confirmed", "checked_in")

class BookingNotFoundError(ValueError):
    pass

class BookingStateError(ValueError):
    pass

class RoomStatusUpdateError(RuntimeError):
    pass

def balance_due(booking: Dict) -> float:
    """Total minus advance; negative when the guest has overpaid"""
    return float(booking.get("total_amount", 0)) - float(booking.get("advance_paid", 0))

def checkout_summary(booking: Dict) -> Dict:
    return {
        "booking_id": str(booking["_id"]),
        "room_id": booking["room_id"],
        "status": booking["status"],
        "total_amount": float(booking.get("total_amount", 0)),
        "advance_paid": float(booking.get("advance_paid", 0)),
        "extra_charges": float(booking.get("extra_charges") or 0),
        "balance_due": balance_due(booking),
    }

async def preview_checkout(booking_id: str) -> Dict:
    booking = await db_ops.get_by_id(Collections.BOOKINGS, booking_id)
    if not booking:
        raise BookingNotFoundError("Booking not found")
    return checkout_summary(booking)

async def checkout_booking(booking_id: str, extra_charges: float = 0) -> Dict:
    """Mark the booking checked out and the room as needing cleaning"""
    booking = await db_ops.get_by_id(Collections.BOOKINGS, booking_id)
    if not booking:
        raise BookingNotFoundError("Booking not found")
    if booking.get("status") not in CHECKOUT_FROM:
        raise BookingStateError(f"Booking is already {booking.get('status')}")

    updated = await db_ops.update(
        Collections.BOOKINGS,
        booking_id,
        {
            "status": "checked_out",
            "check_out": datetime.utcnow(),
            "extra_charges": float(extra_charges or 0),
        },
        extra_filter={"status": {"$in": list(CHECKOUT_FROM)}},
    )
    if not updated:
        raise BookingStateError("Booking was checked out by another request")

    room = await db_ops.update(Collections.ROOMS, booking["room_id"], {"status": "cleaning"})
    if not room:
        logger.error(
            "Booking %s checked out but room %s could not be set to cleaning",
            booking_id, booking["room_id"],
        )
        raise RoomStatusUpdateError("Booking checked out, but the room status could not be updated")

    logger.info("Checked out booking %s from room %s", booking_id, room.get("room_number"))
    return checkout_summary(updated)
