from datetime import datetime, timedelta

from frontdesk.config.database import Collections
from frontdesk.database.db_operations import db_ops
from frontdesk.services.dashboard import dashboard_stats, departures, occupancy_percentage
from frontdesk.services.revenue_reports import summarize_month

# Saturday 2026-10-17, 12:00 lodge time
NOW = datetime(2026, 10, 17, 6, 30)


async def add_booking(room, check_in, expected_checkout, status="checked_in", total_amount=1100, guests=1, **extra):
    booking = await db_ops.create(Collections.BOOKINGS, {
        "room_id": str(room["_id"]),
        "check_in": check_in,
        "expected_checkout": expected_checkout,
        "status": status,
        "total_amount": total_amount,
        "extra_charges": 0,
        **extra,
    })
    await db_ops.create_many(Collections.GUESTS, [
        {"booking_id": str(booking["_id"]), "full_name": f"Guest {i}", "is_primary": i == 0}
        for i in range(guests)
    ])
    return booking


def test_occupancy_excludes_function_halls_and_maintenance():
    rooms = [
        {"status": "occupied", "room_type": "standard"},
        {"status": "occupied", "room_type": "luxury"},
        {"status": "available", "room_type": "standard"},
        {"status": "available", "room_type": "function_hall"},
        {"status": "maintenance", "room_type": "standard"},
    ]
    assert occupancy_percentage(rooms) == 67
    assert occupancy_percentage([]) == 0


async def test_dashboard_stats(make_room):
    first = await make_room("101", status="occupied")
    await make_room("102", status="cleaning")
    await make_room("103")
    await make_room("Hall", floor=0, room_type="function_hall")
    await add_booking(first, NOW - timedelta(hours=1), NOW + timedelta(days=1), guests=3, extra_charges=50)
    # yesterday in lodge time
    await add_booking(first, NOW - timedelta(days=1), NOW, status="checked_out")

    stats = await dashboard_stats(now=NOW)

    assert stats["total_rooms"] == 4
    assert stats["occupied_rooms"] == 1
    assert stats["cleaning_rooms"] == 1
    assert stats["available_rooms"] == 2
    assert stats["arrivals_today"] == 1
    assert stats["guests_today"] == 3
    assert stats["today_collection"] == 1150
    assert stats["occupancy_percentage"] == 33
    assert stats["is_weekend_rush"] is True


async def test_departures_split_overdue_and_upcoming(make_room):
    room = await make_room("101", status="occupied")
    other = await make_room("102", status="occupied")
    far = await make_room("103", status="occupied")
    await add_booking(room, NOW - timedelta(days=1), NOW - timedelta(hours=1))
    await add_booking(other, NOW - timedelta(hours=5), NOW + timedelta(hours=1))
    await add_booking(far, NOW - timedelta(hours=5), NOW + timedelta(hours=5))

    result = await departures(now=NOW)

    assert [d["room_number"] for d in result["overdue"]] == ["101"]
    assert result["overdue"][0]["is_overdue"] is True
    assert result["overdue"][0]["guest_name"] == "Guest 0"
    assert [d["room_number"] for d in result["upcoming"]] == ["102"]


def test_monthly_summary():
    standard = {"room_type": "standard", "floor": 1}
    luxury = {"room_type": "luxury", "floor": 3}
    bookings = [
        {"check_in": datetime(2026, 10, 1, 4, 0), "total_amount": 1100, "base_price": 800,
         "ac_charge": 200, "geyser_charge": 100, "has_ac": True, "has_geyser": True, "room": standard},
        {"check_in": datetime(2026, 10, 1, 10, 0), "total_amount": 800, "base_price": 800,
         "ac_charge": 0, "geyser_charge": 0, "has_ac": False, "has_geyser": False, "room": standard},
        {"check_in": datetime(2026, 10, 15, 4, 0), "total_amount": 1800, "base_price": 1500,
         "ac_charge": 300, "geyser_charge": 0, "has_ac": True, "has_geyser": False, "room": luxury},
    ]

    report = summarize_month(bookings, "2026-10")

    assert report["totals"] == {"total": 3700, "base": 3100, "ac": 500, "geyser": 100, "bookings": 3}
    assert len(report["daily"]) == 31
    assert report["daily"][0] == {"date": "2026-10-01", "revenue": 1900, "bookings": 2}
    assert report["daily"][14]["revenue"] == 1800
    assert [t["room_type"] for t in report["room_types"]] == ["standard", "luxury"]
    assert report["floors"] == [{"floor": 1, "revenue": 1900}, {"floor": 3, "revenue": 1800}]
    assert report["ac_breakdown"] == [{"name": "AC Rooms", "count": 2}, {"name": "Non-AC Rooms", "count": 1}]


def test_monthly_summary_of_quiet_month():
    report = summarize_month([], "2026-02")
    assert report["totals"]["total"] == 0
    assert len(report["daily"]) == 28
    assert report["room_types"] == []
    assert report["ac_breakdown"] == []
