"""
Compliance (police verification) export schemas
"""
from pydantic import BaseModel, Field, validator
from datetime import date, datetime
from typing import Optional, List, Literal

ExportFormat = Literal["tabular", "detailed", "csv", "archive"]

class GuestRecord(BaseModel):
    """Primary guest of one booking, flattened for regulatory submission"""
    booking_id: str
    room_number: str
    check_in: datetime
    check_out: datetime
    guest_name: str
    phone: str
    id_type: str
    id_number: str
    address: Optional[str] = None
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None
    additional_guests: int = 0

    @property
    def has_complete_id(self) -> bool:
        return bool(self.id_front_image) and bool(self.id_back_image)

class GuestRecordSummary(BaseModel):
    booking_id: str
    room_number: str
    check_in: datetime
    check_out: datetime
    guest_name: str
    phone: str
    id_type: str
    id_number: str
    has_id_front: bool
    has_id_back: bool
    additional_guests: int

class ExportRequest(BaseModel):
    start_date: date
    end_date: date
    booking_ids: List[str] = Field(default_factory=list)
    format: ExportFormat = "tabular"
    include_images: bool = True
    password: Optional[str] = Field(None, description="Protects the ID image archive when set")

    @validator("end_date")
    def end_after_start(cls, v, values):
        start = values.get("start_date")
        if start and v < start:
            raise ValueError("End date must be on or after start date")
        return v
