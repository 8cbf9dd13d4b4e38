"""
Authentication utilities - bearer token verification and role checks.

Tokens are issued by the external identity provider; this service only
verifies them and reads the ``sub`` and ``role`` claims.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict
import logging
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from frontdesk.config.settings import settings

logger = logging.getLogger(__name__)

# JWT Bearer token
security = HTTPBearer()

ROLES = ("admin", "staff")

def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT; used for local development tokens and signed storage URLs"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(hours=24))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_token(token: str) -> Dict:
    """Decode and verify a JWT, raising JWTError on failure"""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

def decode_access_token(token: str) -> Dict:
    """Decode and verify a bearer token"""
    try:
        return decode_token(token)
    except JWTError as e:
        logger.warning("JWT verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict:
    """Get current authenticated user from JWT token"""
    payload = decode_access_token(credentials.credentials)
    if not payload.get("sub"):
        logger.warning("Rejected token without subject")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )
    if payload.get("role") not in ROLES:
        payload["role"] = "staff"
    return payload

async def require_admin(current_user: Dict = Depends(get_current_user)) -> Dict:
    """Dependency to require the admin role"""
    if current_user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can perform this action"
        )
    return current_user
