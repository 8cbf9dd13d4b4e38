import base64
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
import pytz
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from frontdesk.config.database import Collections, db_config
from frontdesk.database.db_operations import db_ops
from frontdesk.main import app
from frontdesk.services.guest_lookup import lookup_cache
from frontdesk.services.storage import storage
from frontdesk.utils.auth import get_current_user

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture(autouse=True)
def database(monkeypatch):
    db = AsyncMongoMockClient()["frontdesk_test"]
    monkeypatch.setattr(db_config, "database", db)
    lookup_cache.clear()
    yield db
    lookup_cache.clear()


@pytest.fixture(autouse=True)
def id_proof_dir(tmp_path, monkeypatch):
    root = tmp_path / "id-proofs"
    monkeypatch.setattr(storage, "root", str(root))
    return root


@pytest.fixture
def make_room():
    async def _make_room(room_number="101", floor=1, room_type="standard", base_price=800,
                         ac_charge=200, geyser_charge=100, status="available"):
        return await db_ops.create(Collections.ROOMS, {
            "room_number": room_number,
            "floor": floor,
            "room_type": room_type,
            "base_price": base_price,
            "ac_charge": ac_charge,
            "geyser_charge": geyser_charge,
            "status": status,
            "description": None,
        })
    return _make_room


@pytest.fixture
def tomorrow():
    return datetime.now(pytz.utc) + timedelta(days=1)


def guest_payload(full_name="Ravi Kumar", phone="98765 43210", is_primary=True, with_id=True, **overrides):
    guest = {
        "full_name": full_name,
        "phone": phone,
        "is_primary": is_primary,
        "address": "Hyderabad",
    }
    if with_id:
        guest.update({
            "id_proof_type": "aadhaar",
            "id_proof_number": "1234 5678 9012",
            "id_front_image": PNG_DATA_URL,
            "id_back_image": PNG_DATA_URL,
        })
    guest.update(overrides)
    return guest


def _client_for(user):
    app.dependency_overrides[get_current_user] = lambda: user
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def client():
    async with _client_for({"sub": "desk-1", "role": "staff"}) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client():
    async with _client_for({"sub": "owner-1", "role": "admin"}) as ac:
        yield ac
    app.dependency_overrides.clear()
