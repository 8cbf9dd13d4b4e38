from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from frontdesk.config.database import Collections
from frontdesk.utils.auth import get_current_user
from frontdesk.database.db_operations import db_ops
from frontdesk.utils.helpers import serialize_doc, serialize_docs
from frontdesk.models.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatus,
    CheckoutRequest,
    CheckoutSummary,
)
from frontdesk.models.registration import RegistrationCheck, RegistrationDraft, evaluate, reduce, state_from_draft
from frontdesk.services import booking_queries, booking_workflow, checkout
from frontdesk.services.guest_lookup import lookup_guest_by_phone

router = APIRouter(prefix="/bookings", tags=["Bookings"])

@router.post("/registration-check", response_model=RegistrationCheck)
async def check_registration(
    draft: RegistrationDraft,
    current_user: dict = Depends(get_current_user)
):
    """Evaluate a partially filled registration form: identity, progress and what is missing"""
    room = await db_ops.get_by_id(Collections.ROOMS, draft.room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    state = state_from_draft(room, draft)
    lookup = await lookup_guest_by_phone(state.primary.phone)
    state = reduce(state, {"type": "apply_lookup", "lookup": lookup})
    return evaluate(state)

@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate,
    current_user: dict = Depends(get_current_user)
):
    """Check a guest party into a room"""
    try:
        created = await booking_workflow.create_booking(booking, created_by=current_user.get("sub"))
    except booking_workflow.RoomNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except booking_workflow.RoomUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except booking_workflow.IdentificationRequiredError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "missing": e.missing})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return serialize_doc(created)

@router.get("/", response_model=List[BookingResponse])
async def get_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    limit: int = 500,
    current_user: dict = Depends(get_current_user)
):
    """All bookings, newest first"""
    filter_query = {"status": status_filter} if status_filter else {}
    bookings = await booking_queries.list_bookings(filter_query, limit=limit)
    return serialize_docs(bookings)

@router.get("/active", response_model=List[BookingResponse])
async def get_active_bookings(current_user: dict = Depends(get_current_user)):
    """Confirmed and checked-in bookings ordered by check-in"""
    return serialize_docs(await booking_queries.active_bookings())

@router.get("/today", response_model=List[BookingResponse])
async def get_todays_bookings(current_user: dict = Depends(get_current_user)):
    """Bookings checked in today (lodge time)"""
    return serialize_docs(await booking_queries.todays_bookings())

@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: dict = Depends(get_current_user)
):
    booking = await booking_queries.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return serialize_doc(booking)

@router.get("/{booking_id}/checkout-summary", response_model=CheckoutSummary)
async def get_checkout_summary(
    booking_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Balance due before confirming the checkout"""
    try:
        return await checkout.preview_checkout(booking_id)
    except checkout.BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/{booking_id}/checkout", response_model=CheckoutSummary)
async def checkout_booking(
    booking_id: str,
    request: CheckoutRequest,
    current_user: dict = Depends(get_current_user)
):
    """Check the guests out and send the room to housekeeping"""
    try:
        return await checkout.checkout_booking(booking_id, request.extra_charges)
    except checkout.BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except checkout.BookingStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except checkout.RoomStatusUpdateError as e:
        raise HTTPException(status_code=500, detail=str(e))
