from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Literal

RoomStatus = Literal["available", "occupied", "cleaning", "maintenance"]
RoomType = Literal["standard", "luxury", "penthouse", "function_hall"]

class RoomBase(BaseModel):
    room_number: str = Field(..., min_length=1, description="Room number (e.g. '101')")
    floor: int = Field(..., ge=0)
    room_type: RoomType = "standard"
    base_price: float = Field(..., ge=0, description="Base tariff per night")
    ac_charge: float = Field(default=0, ge=0, description="Surcharge when AC is switched on")
    geyser_charge: float = Field(default=0, ge=0, description="Surcharge for hot water")
    status: RoomStatus = "available"
    description: Optional[str] = None

class RoomCreate(RoomBase):
    pass

class RoomStatusUpdate(BaseModel):
    status: RoomStatus

class RoomPricingUpdate(BaseModel):
    base_price: float = Field(..., ge=0)
    ac_charge: float = Field(..., ge=0)
    geyser_charge: float = Field(..., ge=0)

class RoomResponse(RoomBase):
    id: str = Field(alias="_id")
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
