"""
Read side for bookings: lists with their room and guests attached
"""
from datetime import datetime
from typing import Dict, List, Optional

from frontdesk.config.database import Collections
from frontdesk.database.db_operations import db_ops, to_object_id
from frontdesk.utils.helpers import local_day_bounds, local_today

ACTIVE_STATUSES = ["confirmed", "checked_in"]

async def attach_details(bookings: List[Dict]) -> List[Dict]:
    """Embed ``room`` and ``guests`` into each booking (two queries in total)"""
    if not bookings:
        return bookings
    room_ids = {to_object_id(b["room_id"]) for b in bookings} - {None}
    rooms = await db_ops.get_all(Collections.ROOMS, {"_id": {"$in": list(room_ids)}}, limit=len(room_ids) or 1)
    rooms_by_id = {str(r["_id"]): r for r in rooms}

    booking_ids = [str(b["_id"]) for b in bookings]
    guests = await db_ops.get_all(
        Collections.GUESTS,
        {"booking_id": {"$in": booking_ids}},
        limit=0,
        sort=[("is_primary", -1), ("created_at", 1)],
    )
    guests_by_booking: Dict[str, List[Dict]] = {}
    for guest in guests:
        guests_by_booking.setdefault(guest["booking_id"], []).append(guest)

    for booking in bookings:
        booking["room"] = rooms_by_id.get(booking["room_id"])
        booking["guests"] = guests_by_booking.get(str(booking["_id"]), [])
    return bookings

async def list_bookings(filter_query: Optional[Dict] = None, limit: int = 500, sort=None) -> List[Dict]:
    bookings = await db_ops.get_all(
        Collections.BOOKINGS,
        filter_query or {},
        limit=limit,
        sort=sort or [("created_at", -1)],
    )
    return await attach_details(bookings)

async def get_booking(booking_id: str) -> Optional[Dict]:
    booking = await db_ops.get_by_id(Collections.BOOKINGS, booking_id)
    if not booking:
        return None
    return (await attach_details([booking]))[0]

async def active_bookings() -> List[Dict]:
    return await list_bookings({"status": {"$in": ACTIVE_STATUSES}}, sort=[("check_in", 1)])

async def bookings_checked_in_between(start: datetime, end: datetime, limit: int = 0) -> List[Dict]:
    return await list_bookings(
        {"check_in": {"$gte": start, "$lte": end}},
        limit=limit,
        sort=[("check_in", 1)],
    )

async def todays_bookings(now: Optional[datetime] = None) -> List[Dict]:
    today = local_today(now)
    start, end = local_day_bounds(today, today)
    return await bookings_checked_in_between(start, end)
