"""
Monthly revenue report: totals, daily trend and breakdowns by room type, floor
and AC usage. Bookings belong to the month their check-in falls in.
"""
from datetime import timedelta
from typing import Dict, List

from frontdesk.services.booking_queries import bookings_checked_in_between
from frontdesk.utils.helpers import local_day_bounds, month_bounds, to_local

ROOM_TYPE_LABELS = {
    "standard": "Standard",
    "luxury": "Luxury",
    "penthouse": "Penthouse",
    "function_hall": "Function Hall",
}

def _amount(booking: Dict, field: str) -> float:
    return float(booking.get(field) or 0)

def summarize_month(bookings: List[Dict], month: str) -> Dict:
    first, last = month_bounds(month)

    totals = {
        "total": sum(_amount(b, "total_amount") for b in bookings),
        "base": sum(_amount(b, "base_price") for b in bookings),
        "ac": sum(_amount(b, "ac_charge") for b in bookings if b.get("has_ac")),
        "geyser": sum(_amount(b, "geyser_charge") for b in bookings if b.get("has_geyser")),
        "bookings": len(bookings),
    }

    by_day: Dict[str, List[Dict]] = {}
    for b in bookings:
        by_day.setdefault(to_local(b["check_in"]).date().isoformat(), []).append(b)
    daily = []
    day = first
    while day <= last:
        day_bookings = by_day.get(day.isoformat(), [])
        daily.append({
            "date": day.isoformat(),
            "revenue": sum(_amount(b, "total_amount") for b in day_bookings),
            "bookings": len(day_bookings),
        })
        day += timedelta(days=1)

    by_type: Dict[str, float] = {}
    by_floor: Dict[int, float] = {}
    for b in bookings:
        room = b.get("room") or {}
        room_type = room.get("room_type")
        if room_type:
            by_type[room_type] = by_type.get(room_type, 0) + _amount(b, "total_amount")
        if room.get("floor") is not None:
            by_floor[room["floor"]] = by_floor.get(room["floor"], 0) + _amount(b, "total_amount")

    ac_count = sum(1 for b in bookings if b.get("has_ac"))
    return {
        "month": month,
        "totals": totals,
        "daily": daily,
        "room_types": [
            {"room_type": key, "name": label, "revenue": by_type[key]}
            for key, label in ROOM_TYPE_LABELS.items()
            if by_type.get(key)
        ],
        "floors": [{"floor": floor, "revenue": by_floor[floor]} for floor in sorted(by_floor)],
        "ac_breakdown": [
            item for item in (
                {"name": "AC Rooms", "count": ac_count},
                {"name": "Non-AC Rooms", "count": len(bookings) - ac_count},
            )
            if item["count"] > 0
        ],
    }

async def monthly_report(month: str) -> Dict:
    first, last = month_bounds(month)
    start, end = local_day_bounds(first, last)
    bookings = await bookings_checked_in_between(start, end)
    return summarize_month(bookings, month)
