"""
ID-proof object storage.

Images live on local disk under ``settings.ID_PROOF_DIR`` at
``{booking_id}/{guest_id}/{front|back}.{ext}``. Stored references are the
relative paths; reading them back goes through short-lived signed URLs whose
token is a JWT naming the path.
"""
import base64
import binascii
import logging
import os
import re
import shutil
from datetime import timedelta
from typing import Optional, Tuple
from urllib.parse import urlencode

from jose import JWTError

from frontdesk.config.settings import settings
from frontdesk.utils.auth import create_access_token, decode_token

logger = logging.getLogger(__name__)

SIGNED_URL_PATH = "/api/storage/id-proofs/signed"
TOKEN_PURPOSE = "id-proof"

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,(?P<payload>.*)$", re.DOTALL)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

class StorageError(Exception):
    """Raised when an object cannot be written or read"""

def is_data_url(value: Optional[str]) -> bool:
    return bool(value) and value.startswith("data:")

def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """Split inline image data into raw bytes and its mime type"""
    match = _DATA_URL.match(data_url or "")
    if not match:
        raise ValueError("Not a base64 data URL")
    try:
        payload = base64.b64decode(match.group("payload"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image data: {e}")
    return payload, match.group("mime") or "image/jpeg"

def extension_for(mime: str, filename: Optional[str] = None) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[1].lower()
    return EXTENSIONS.get(mime, "jpg")

def object_path(booking_id: str, guest_id: str, side: str, ext: str) -> str:
    if side not in ("front", "back"):
        raise ValueError(f"Unknown image side: {side}")
    return f"{booking_id}/{guest_id}/{side}.{ext}"

class IdProofStorage:
    """Local-disk bucket for ID proof images"""

    def __init__(self, root: str = None):
        self.root = root or settings.ID_PROOF_DIR

    def resolve(self, path: str) -> str:
        """Absolute location of an object, refusing paths that escape the bucket"""
        root = os.path.abspath(self.root)
        full = os.path.abspath(os.path.join(root, path))
        if full != root and not full.startswith(root + os.sep):
            raise StorageError(f"Invalid object path: {path}")
        return full

    async def upload(self, data: bytes, path: str) -> str:
        """Write (or overwrite) an object and return its stored path"""
        full = self.resolve(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as buffer:
                buffer.write(data)
        except OSError as e:
            raise StorageError(f"Failed to upload image: {e}")
        return path

    async def upload_fileobj(self, fileobj, path: str) -> str:
        full = self.resolve(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as buffer:
                shutil.copyfileobj(fileobj, buffer)
        except OSError as e:
            raise StorageError(f"Failed to upload image: {e}")
        return path

    async def download(self, path: str) -> bytes:
        full = self.resolve(path)
        if not os.path.isfile(full):
            raise StorageError(f"Object not found: {path}")
        with open(full, "rb") as handle:
            return handle.read()

    def exists(self, path: str) -> bool:
        try:
            return os.path.isfile(self.resolve(path))
        except StorageError:
            return False

    async def delete_prefix(self, prefix: str) -> None:
        """Remove every object stored under a booking/correlation id"""
        full = self.resolve(prefix)
        if os.path.isdir(full):
            shutil.rmtree(full, ignore_errors=True)

    def create_signed_url(self, path: str, expires_in: int = None) -> str:
        """Time-limited URL for reading one object (about an hour by default)"""
        self.resolve(path)
        expires_in = min(expires_in or settings.SIGNED_URL_EXPIRE_SECONDS, settings.SIGNED_URL_EXPIRE_SECONDS)
        token = create_access_token(
            {"path": path, "purpose": TOKEN_PURPOSE},
            expires_delta=timedelta(seconds=expires_in),
        )
        return f"{settings.PUBLIC_BASE_URL}{SIGNED_URL_PATH}?{urlencode({'token': token})}"

    def verify_signed_token(self, token: str) -> str:
        """Return the object path a signed URL grants, or raise StorageError"""
        try:
            claims = decode_token(token)
        except JWTError as e:
            raise StorageError(f"Invalid or expired link: {e}")
        if claims.get("purpose") != TOKEN_PURPOSE or not claims.get("path"):
            raise StorageError("Invalid or expired link")
        return claims["path"]

storage = IdProofStorage()
