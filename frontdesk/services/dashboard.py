"""
Dashboard figures derived from current room and booking state (read only)
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from frontdesk.config.database import Collections
from frontdesk.config.settings import settings
from frontdesk.database.db_operations import db_ops
from frontdesk.services.booking_queries import active_bookings, todays_bookings
from frontdesk.utils.helpers import to_local

# Friday, Saturday, Sunday
WEEKEND_DAYS = (4, 5, 6)

def occupancy_percentage(rooms: List[Dict]) -> int:
    """Occupied share of bookable rooms (function halls and maintenance excluded)"""
    occupied = sum(1 for r in rooms if r.get("status") == "occupied")
    bookable = sum(
        1 for r in rooms
        if r.get("room_type") != "function_hall" and r.get("status") != "maintenance"
    ) or 1
    return round(occupied / bookable * 100)

async def dashboard_stats(now: Optional[datetime] = None) -> Dict:
    now = now or datetime.utcnow()
    rooms = await db_ops.get_all(Collections.ROOMS, {}, limit=0)
    today = await todays_bookings(now)

    def count(status: str) -> int:
        return sum(1 for r in rooms if r.get("status") == status)

    return {
        "total_rooms": len(rooms),
        "occupied_rooms": count("occupied"),
        "available_rooms": count("available"),
        "cleaning_rooms": count("cleaning"),
        "maintenance_rooms": count("maintenance"),
        "guests_today": sum(len(b.get("guests") or []) for b in today),
        "arrivals_today": len(today),
        "today_collection": sum(
            float(b.get("total_amount") or 0) + float(b.get("extra_charges") or 0) for b in today
        ),
        "occupancy_percentage": occupancy_percentage(rooms),
        "is_weekend_rush": to_local(now).weekday() in WEEKEND_DAYS,
    }

def _departure(booking: Dict, now: datetime) -> Dict:
    primary = next((g for g in booking.get("guests") or [] if g.get("is_primary")), {})
    return {
        "booking_id": str(booking["_id"]),
        "room_number": (booking.get("room") or {}).get("room_number", "N/A"),
        "guest_name": primary.get("full_name", "Guest"),
        "expected_checkout": booking["expected_checkout"],
        "is_overdue": booking["expected_checkout"] < now,
    }

async def departures(now: Optional[datetime] = None) -> Dict:
    """Checked-in bookings past their departure, and those due within the window"""
    now = now or datetime.utcnow()
    window = now + timedelta(hours=settings.UPCOMING_DEPARTURE_HOURS)
    checked_in = [b for b in await active_bookings() if b.get("status") == "checked_in"]
    overdue = [_departure(b, now) for b in checked_in if b["expected_checkout"] < now]
    upcoming = [_departure(b, now) for b in checked_in if now < b["expected_checkout"] <= window]
    return {"overdue": overdue, "upcoming": upcoming}
