"""
Returning-guest lookup by phone number.

The lookup is advisory: it pre-fills the registration form and decides whether
a previously verified ID can be reused. Any failure degrades to "not found".
"""
import logging
import time
from typing import Dict, Optional, Tuple

from frontdesk.config.database import Collections
from frontdesk.config.settings import settings
from frontdesk.database.db_operations import db_ops
from frontdesk.models.guest import GuestLookupResult
from frontdesk.utils.helpers import normalize_phone

logger = logging.getLogger(__name__)

# Stays considered when deriving first/last stay and the latest verified record
MAX_HISTORY = 200

class LookupCache:
    """Short-lived in-process cache keyed by normalized phone"""

    def __init__(self, ttl_seconds: float):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, Tuple[float, GuestLookupResult]] = {}

    def get(self, key: str) -> Optional[GuestLookupResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if time.monotonic() - stored_at > self.ttl_seconds:
            self._entries.pop(key, None)
            return None
        return result

    def set(self, key: str, result: GuestLookupResult) -> None:
        now = time.monotonic()
        self.prune(now)
        self._entries[key] = (now, result)

    def prune(self, now: Optional[float] = None) -> None:
        """Drop every expired entry"""
        now = time.monotonic() if now is None else now
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

lookup_cache = LookupCache(settings.GUEST_LOOKUP_CACHE_SECONDS)

async def _query_guest(phone_number: str) -> GuestLookupResult:
    history = await db_ops.get_all(
        Collections.GUESTS,
        {"phone_number": phone_number},
        limit=MAX_HISTORY,
        sort=[("created_at", -1)],
    )
    if not history:
        return GuestLookupResult.not_found()

    latest = history[0]
    verified = next((g for g in history if g.get("id_verified")), None)
    stays = [g.get("first_stay_at") or g.get("created_at") for g in history]
    stays += [g.get("last_stay_at") or g.get("created_at") for g in history]
    stays = [s for s in stays if s is not None]

    result = GuestLookupResult(
        guest_exists=True,
        guest_id=str(latest["_id"]),
        full_name=latest.get("full_name"),
        phone_number=latest.get("phone_number") or phone_number,
        id_verified=verified is not None,
        id_proof_type=(verified or latest).get("id_proof_type"),
        first_stay_at=min(stays) if stays else None,
        last_stay_at=max(stays) if stays else None,
    )
    if verified is not None:
        result.id_front_image = verified.get("id_front_image")
        result.id_back_image = verified.get("id_back_image")
    return result

async def lookup_guest_by_phone(phone: Optional[str], use_cache: bool = True) -> GuestLookupResult:
    """Most recent guest sharing this phone number, or a not-found result"""
    phone_number = normalize_phone(phone)
    if not phone_number:
        return GuestLookupResult.not_found()

    if use_cache:
        cached = lookup_cache.get(phone_number)
        if cached is not None:
            return cached

    try:
        result = await _query_guest(phone_number)
    except Exception as e:
        logger.error("Guest lookup error for %s: %s", phone_number, e)
        return GuestLookupResult.not_found()

    lookup_cache.set(phone_number, result)
    return result
