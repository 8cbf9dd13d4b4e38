"""
Guest schemas: registration payloads, stored guests and the phone lookup result
"""
from pydantic import BaseModel, EmailStr, Field, validator
from datetime import datetime
from typing import Optional, Literal

IdProofType = Literal["aadhaar", "passport", "driving_license", "voter_id"]

class GuestPayload(BaseModel):
    """One guest as entered on the registration form"""
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None
    phone_number: Optional[str] = Field(None, description="Normalized phone, derived from phone when omitted")
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_primary: bool = False
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = None
    # Either a stored object path, or inline image data ("data:image/jpeg;base64,...")
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None

    @validator("email", "phone", "phone_number", "address", "id_proof_number", "id_front_image", "id_back_image", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class GuestResponse(BaseModel):
    id: str = Field(alias="_id")
    booking_id: str
    full_name: str
    phone: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    is_primary: bool
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = None
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None
    id_verified: bool = False
    first_stay_at: Optional[datetime] = None
    last_stay_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        populate_by_name = True

class GuestLookupResult(BaseModel):
    """Point-in-time projection of a returning guest, keyed by phone"""
    guest_exists: bool = False
    guest_id: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    id_verified: bool = False
    id_proof_type: Optional[IdProofType] = None
    id_front_image: Optional[str] = None
    id_back_image: Optional[str] = None
    first_stay_at: Optional[datetime] = None
    last_stay_at: Optional[datetime] = None

    @classmethod
    def not_found(cls) -> "GuestLookupResult":
        return cls()
