"""
Booking model and schemas
Walk-in check-ins with their guests, and the checkout request/summary
"""
from pydantic import BaseModel, Field, validator
from datetime import datetime
from typing import Optional, List, Literal, Dict, Any

from frontdesk.models.guest import GuestPayload, GuestResponse

BookingStatus = Literal["confirmed", "checked_in", "checked_out", "cancelled"]

class BookingCreate(BaseModel):
    room_id: str = Field(..., description="Room being assigned")
    expected_checkout: datetime = Field(..., description="Expected departure date and time")
    has_ac: bool = False
    has_geyser: bool = False
    advance_paid: float = Field(default=0, ge=0, description="Advance amount cannot be negative")
    notes: Optional[str] = None
    guests: List[GuestPayload] = Field(..., min_items=1, description="Primary guest details are required")

    @validator("guests")
    def exactly_one_primary(cls, guests):
        primaries = [g for g in guests if g.is_primary]
        if len(primaries) != 1:
            raise ValueError("Exactly one primary guest is required")
        return guests

class CheckoutRequest(BaseModel):
    extra_charges: float = Field(default=0, ge=0)

class CheckoutSummary(BaseModel):
    booking_id: str
    room_id: str
    status: BookingStatus
    total_amount: float
    advance_paid: float
    extra_charges: float = 0
    balance_due: float

class BookingResponse(BaseModel):
    id: str = Field(alias="_id")
    room_id: str
    check_in: datetime
    expected_checkout: datetime
    check_out: Optional[datetime] = None
    has_ac: bool
    has_geyser: bool
    base_price: float
    ac_charge: float
    geyser_charge: float
    total_amount: float
    advance_paid: float
    extra_charges: float = 0
    status: BookingStatus
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    room: Optional[Dict[str, Any]] = None
    guests: List[GuestResponse] = []

    class Config:
        populate_by_name = True
