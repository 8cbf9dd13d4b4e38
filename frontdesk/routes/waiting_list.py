from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from frontdesk.config.database import Collections
from frontdesk.utils.auth import get_current_user
from frontdesk.database.db_operations import db_ops
from frontdesk.utils.helpers import normalize_phone, serialize_doc, serialize_docs
from frontdesk.models.waiting_list import (
    WaitingListCreate,
    WaitingListResponse,
    WaitingListUpdate,
    WaitingStatus,
)

router = APIRouter(prefix="/waiting-list", tags=["Waiting List"])

@router.post("/", response_model=WaitingListResponse, status_code=status.HTTP_201_CREATED)
async def add_to_waiting_list(
    entry: WaitingListCreate,
    current_user: dict = Depends(get_current_user)
):
    """Queue a walk-in while no suitable room is free"""
    entry_dict = entry.model_dump()
    entry_dict["phone"] = normalize_phone(entry.phone) or entry.phone
    created = await db_ops.create(Collections.WAITING_LIST, entry_dict)
    return serialize_doc(created)

@router.get("/", response_model=List[WaitingListResponse])
async def get_waiting_list(
    status_filter: Optional[WaitingStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user)
):
    """Waiting list in arrival order"""
    filter_query = {"status": status_filter} if status_filter else {}
    entries = await db_ops.get_all(Collections.WAITING_LIST, filter_query, limit=0, sort=[("created_at", 1)])
    return serialize_docs(entries)

@router.patch("/{entry_id}", response_model=WaitingListResponse)
async def update_waiting_entry(
    entry_id: str,
    update: WaitingListUpdate,
    current_user: dict = Depends(get_current_user)
):
    update_data = update.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = await db_ops.update(Collections.WAITING_LIST, entry_id, update_data)
    if not updated:
        raise HTTPException(status_code=404, detail="Waiting list entry not found")
    return serialize_doc(updated)
