from datetime import datetime

from frontdesk.config.database import Collections, db_config
from frontdesk.database.db_operations import db_ops
from frontdesk.services import guest_lookup
from frontdesk.services.guest_lookup import LookupCache, lookup_guest_by_phone


async def add_guest_record(created_at=datetime(2026, 1, 5), **fields):
    doc = {
        "created_at": created_at,
        "booking_id": "b0",
        "full_name": "Ravi Kumar",
        "phone": "98765 43210",
        "phone_number": "9876543210",
        "is_primary": True,
        "id_proof_type": None,
        "id_front_image": None,
        "id_back_image": None,
        "id_verified": False,
        "first_stay_at": datetime(2026, 1, 5),
        "last_stay_at": datetime(2026, 1, 5),
    }
    doc.update(fields)
    await db_config.get_collection(Collections.GUESTS).insert_one(doc)
    return doc


async def test_unknown_or_empty_phone_is_not_found():
    assert (await lookup_guest_by_phone("")).guest_exists is False
    assert (await lookup_guest_by_phone("12345")).guest_exists is False


async def test_verified_history_is_reused():
    await add_guest_record(
        id_proof_type="passport",
        id_front_image="b0/g0/front.png",
        id_back_image="b0/g0/back.png",
        id_verified=True,
    )
    latest = await add_guest_record(
        booking_id="b1",
        created_at=datetime(2026, 3, 9),
        full_name="Ravi K",
        first_stay_at=datetime(2026, 1, 5),
        last_stay_at=datetime(2026, 3, 9),
    )

    result = await lookup_guest_by_phone("(98765) 43210")

    assert result.guest_exists
    assert result.guest_id == str(latest["_id"])
    assert result.full_name == "Ravi K"
    assert result.id_verified
    assert result.id_proof_type == "passport"
    assert result.id_front_image == "b0/g0/front.png"
    assert result.first_stay_at == datetime(2026, 1, 5)
    assert result.last_stay_at == datetime(2026, 3, 9)


async def test_unverified_guest_gets_no_images():
    await add_guest_record(id_front_image="b0/g0/front.png")
    result = await lookup_guest_by_phone("9876543210")
    assert result.guest_exists
    assert not result.id_verified
    assert result.id_front_image is None


async def test_lookup_errors_degrade_to_not_found(monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(db_ops, "get_all", broken)
    result = await lookup_guest_by_phone("9876543210")
    assert result.guest_exists is False


async def test_results_are_cached_until_invalidated():
    assert (await lookup_guest_by_phone("9876543210")).guest_exists is False
    await add_guest_record()

    assert (await lookup_guest_by_phone("9876543210")).guest_exists is False
    assert (await lookup_guest_by_phone("9876543210", use_cache=False)).guest_exists is True

    guest_lookup.lookup_cache.invalidate("9876543210")
    assert (await lookup_guest_by_phone("9876543210")).guest_exists is True


def test_cache_entries_expire(monkeypatch):
    clock = [100.0]
    monkeypatch.setattr(guest_lookup.time, "monotonic", lambda: clock[0])
    cache = LookupCache(ttl_seconds=30)
    cache.set("9876543210", guest_lookup.GuestLookupResult(guest_exists=True))

    clock[0] += 29
    assert cache.get("9876543210") is not None
    clock[0] += 2
    assert cache.get("9876543210") is None


def test_expired_entries_are_pruned_on_write(monkeypatch):
    clock = [100.0]
    monkeypatch.setattr(guest_lookup.time, "monotonic", lambda: clock[0])
    cache = LookupCache(ttl_seconds=30)
    for i in range(10):
        cache.set(f"90000000{i:02d}", guest_lookup.GuestLookupResult.not_found())
    assert len(cache) == 10

    clock[0] += 31
    cache.set("9876543210", guest_lookup.GuestLookupResult(guest_exists=True))
    assert len(cache) == 1
    assert cache.get("9876543210") is not None


async def test_distinct_lookups_do_not_accumulate(monkeypatch):
    clock = [100.0]
    monkeypatch.setattr(guest_lookup.time, "monotonic", lambda: clock[0])
    for i in range(10):
        await lookup_guest_by_phone(f"90000000{i:02d}")
        clock[0] += 31
    assert len(guest_lookup.lookup_cache) == 1
