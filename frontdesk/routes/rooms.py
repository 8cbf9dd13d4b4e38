from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from pymongo.errors import DuplicateKeyError
from frontdesk.config.database import Collections
from frontdesk.utils.auth import get_current_user, require_admin
from frontdesk.database.db_operations import db_ops
from frontdesk.services.booking_queries import ACTIVE_STATUSES
from frontdesk.utils.helpers import room_sort_key, serialize_doc, serialize_docs
from frontdesk.models.room import (
    RoomCreate,
    RoomPricingUpdate,
    RoomResponse,
    RoomStatus,
    RoomStatusUpdate,
    RoomType,
)

router = APIRouter(prefix="/rooms", tags=["Rooms"])

@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room: RoomCreate,
    current_user: dict = Depends(require_admin)
):
    """Add a room to the inventory"""
    existing = await db_ops.get_one(Collections.ROOMS, {"room_number": room.room_number})
    if existing:
        raise HTTPException(status_code=409, detail=f"Room {room.room_number} already exists")

    try:
        created = await db_ops.create(Collections.ROOMS, room.model_dump())
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail=f"Room {room.room_number} already exists")
    return serialize_doc(created)

@router.get("/", response_model=List[RoomResponse])
async def get_rooms(
    floor: Optional[int] = None,
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    room_type: Optional[RoomType] = None,
    current_user: dict = Depends(get_current_user)
):
    """All rooms ordered by floor, then room number"""
    filter_query = {}
    if floor is not None:
        filter_query["floor"] = floor
    if room_status:
        filter_query["status"] = room_status
    if room_type:
        filter_query["room_type"] = room_type

    rooms = await db_ops.get_all(Collections.ROOMS, filter_query, limit=0)
    return serialize_docs(sorted(rooms, key=room_sort_key))

@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: str,
    current_user: dict = Depends(get_current_user)
):
    room = await db_ops.get_by_id(Collections.ROOMS, room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return serialize_doc(room)

@router.patch("/{room_id}/status", response_model=RoomResponse)
async def update_room_status(
    room_id: str,
    update: RoomStatusUpdate,
    current_user: dict = Depends(get_current_user)
):
    """Housekeeping and maintenance status changes.

    A room holding a confirmed or checked-in booking stays occupied until checkout.
    """
    if update.status != "occupied":
        active = await db_ops.count(
            Collections.BOOKINGS, {"room_id": room_id, "status": {"$in": ACTIVE_STATUSES}}
        )
        if active:
            raise HTTPException(status_code=409, detail="Room has an active booking; check the guests out first")

    updated = await db_ops.update(Collections.ROOMS, room_id, {"status": update.status})
    if not updated:
        raise HTTPException(status_code=404, detail="Room not found")
    return serialize_doc(updated)

@router.patch("/{room_id}/pricing", response_model=RoomResponse)
async def update_room_pricing(
    room_id: str,
    pricing: RoomPricingUpdate,
    current_user: dict = Depends(require_admin)
):
    """Change the tariff; existing bookings keep the prices they were made at"""
    updated = await db_ops.update(Collections.ROOMS, room_id, pricing.model_dump())
    if not updated:
        raise HTTPException(status_code=404, detail="Room not found")
    return serialize_doc(updated)
