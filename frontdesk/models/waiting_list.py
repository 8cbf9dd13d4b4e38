from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Literal

from frontdesk.models.room import RoomType

WaitingStatus = Literal["waiting", "contacted", "accommodated", "cancelled"]

class WaitingListBase(BaseModel):
    guest_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    has_ac: Optional[bool] = None
    preferred_room_type: Optional[RoomType] = None
    notes: Optional[str] = None
    status: WaitingStatus = "waiting"

class WaitingListCreate(WaitingListBase):
    pass

class WaitingListUpdate(BaseModel):
    status: Optional[WaitingStatus] = None
    notes: Optional[str] = None

class WaitingListResponse(WaitingListBase):
    id: str = Field(alias="_id")
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
