from datetime import date, datetime

import pytest
from bson import ObjectId

from frontdesk.utils.helpers import (
    local_day_bounds,
    local_today,
    month_bounds,
    normalize_phone,
    room_sort_key,
    serialize_doc,
    to_utc_naive,
)


@pytest.mark.parametrize("raw, expected", [
    ("98765 43210", "9876543210"),
    ("(040) 2345-6789", "04023456789"),
    ("+91 98765-43210", "+919876543210"),
    ("", ""),
    (None, ""),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", ["98765 43210", "(040) 2345-6789", " 1 2 3 ", "plain"])
def test_normalize_phone_is_idempotent(raw):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once


def test_local_day_bounds_are_lodge_midnights_in_utc():
    start, end = local_day_bounds(date(2026, 10, 19), date(2026, 10, 20))
    # Asia/Kolkata is UTC+05:30
    assert start == datetime(2026, 10, 18, 18, 30)
    assert end.date() == date(2026, 10, 20)
    assert (end.hour, end.minute, end.second) == (18, 29, 59)


def test_local_today_rolls_over_before_utc_midnight():
    assert local_today(datetime(2026, 10, 19, 19, 0)) == date(2026, 10, 20)


def test_naive_input_is_lodge_time():
    assert to_utc_naive(datetime(2026, 10, 19, 12, 0)) == datetime(2026, 10, 19, 6, 30)


def test_month_bounds():
    assert month_bounds("2026-02") == (date(2026, 2, 1), date(2026, 2, 28))
    assert month_bounds("2026-12") == (date(2026, 12, 1), date(2026, 12, 31))
    with pytest.raises(ValueError):
        month_bounds("October")


def test_serialize_doc_converts_ids_and_datetimes():
    oid = ObjectId()
    doc = serialize_doc({
        "_id": oid,
        "check_in": datetime(2026, 10, 19, 6, 30),
        "guests": [{"_id": oid}],
    })
    assert doc["_id"] == str(oid)
    assert doc["check_in"] == "2026-10-19T12:00:00+05:30"
    assert doc["guests"][0]["_id"] == str(oid)


def test_room_sort_key_orders_numbers_numerically():
    rooms = [
        {"floor": 2, "room_number": "1001"},
        {"floor": 2, "room_number": "201"},
        {"floor": 0, "room_number": "Hall"},
        {"floor": 1, "room_number": "101"},
    ]
    assert [r["room_number"] for r in sorted(rooms, key=room_sort_key)] == ["Hall", "101", "201", "1001"]
