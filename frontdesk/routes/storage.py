"""
ID proof upload and signed download
"""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from frontdesk.config.settings import settings
from frontdesk.services.storage import EXTENSIONS, StorageError, extension_for, object_path, storage
from frontdesk.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["Storage"])

class SignRequest(BaseModel):
    path: str
    expires_in: Optional[int] = Field(None, gt=0, le=settings.SIGNED_URL_EXPIRE_SECONDS)

@router.post("/id-proofs", status_code=status.HTTP_201_CREATED)
async def upload_id_proof(
    booking_id: str = Form(...),
    guest_id: str = Form(...),
    side: Literal["front", "back"] = Form(...),
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user)
):
    """Store one side of an ID proof; returns the stored path and a signed URL"""
    if file.content_type not in EXTENSIONS:
        raise HTTPException(status_code=400, detail="Only JPEG/PNG/WEBP images allowed")

    data = await file.read()
    if len(data) > settings.MAX_ID_IMAGE_BYTES:
        raise HTTPException(status_code=413, detail="Image must be 5 MB or smaller")

    try:
        path = object_path(booking_id, guest_id, side, extension_for(file.content_type))
        await storage.upload(data, path)
    except (StorageError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Stored ID proof %s (%d bytes)", path, len(data))
    return {"path": path, "signed_url": storage.create_signed_url(path)}

@router.post("/id-proofs/sign")
async def sign_id_proof(
    request: SignRequest,
    current_user: dict = Depends(get_current_user)
):
    """Short-lived read link for a stored ID proof"""
    if not storage.exists(request.path):
        raise HTTPException(status_code=404, detail="Image not found")
    return {"signed_url": storage.create_signed_url(request.path, request.expires_in)}

@router.get("/id-proofs/signed")
async def get_signed_id_proof(token: str = Query(...)):
    """Serve an ID proof to whoever holds a valid signed link"""
    try:
        path = storage.verify_signed_token(token)
    except StorageError as e:
        raise HTTPException(status_code=401, detail=str(e))

    try:
        data = await storage.download(path)
    except StorageError:
        raise HTTPException(status_code=404, detail="Image not found")

    ext = path.rsplit(".", 1)[-1].lower()
    media_type = next((mime for mime, e in EXTENSIONS.items() if e == ext), "application/octet-stream")
    return Response(content=data, media_type=media_type)
