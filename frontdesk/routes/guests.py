import re
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from frontdesk.config.database import Collections
from frontdesk.utils.auth import get_current_user
from frontdesk.database.db_operations import db_ops
from frontdesk.utils.helpers import normalize_phone, serialize_docs
from frontdesk.models.guest import GuestLookupResult, GuestResponse
from frontdesk.services.guest_lookup import lookup_guest_by_phone

router = APIRouter(prefix="/guests", tags=["Guests"])

@router.get("/lookup", response_model=GuestLookupResult)
async def lookup_guest(
    phone: str = Query("", description="Phone number as typed; spaces, dashes and parentheses are ignored"),
    current_user: dict = Depends(get_current_user)
):
    """Returning-guest lookup used while the registration form is filled in"""
    return await lookup_guest_by_phone(phone)

@router.get("/", response_model=List[GuestResponse])
async def get_guests(
    search: Optional[str] = None,
    limit: int = 200,
    current_user: dict = Depends(get_current_user)
):
    """Guest register, newest first, optionally filtered by name or phone"""
    filter_query = {}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        filter_query["$or"] = [{"full_name": pattern}, {"phone": pattern}]
        phone = normalize_phone(search)
        if phone:
            filter_query["$or"].append({"phone_number": {"$regex": re.escape(phone)}})

    guests = await db_ops.get_all(Collections.GUESTS, filter_query, limit=limit, sort=[("created_at", -1)])
    return serialize_docs(guests)
