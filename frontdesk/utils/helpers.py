"""
Helper utility functions
"""
from bson import ObjectId
from typing import Dict, List, Optional, Tuple
from datetime import date, datetime, time, timedelta
import re
import pytz

from frontdesk.config.settings import settings

LODGE_TZ = pytz.timezone(settings.TIMEZONE)

_PHONE_NOISE = re.compile(r"[\s\-()]")

def normalize_phone(phone: Optional[str]) -> str:
    """Strip spaces, dashes and parentheses from a phone number"""
    if not phone:
        return ""
    return _PHONE_NOISE.sub("", phone)

def to_local(value: datetime) -> datetime:
    """Naive datetimes coming out of Mongo are UTC"""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(LODGE_TZ)

def to_utc_naive(value: datetime) -> datetime:
    """Datetimes are stored as naive UTC; naive input is taken as lodge local time"""
    if value.tzinfo is None:
        value = LODGE_TZ.localize(value)
    return value.astimezone(pytz.utc).replace(tzinfo=None)

def local_day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start-of-day(start), end-of-day(end)] in lodge time, as naive UTC"""
    lower = LODGE_TZ.localize(datetime.combine(start, time.min))
    upper = LODGE_TZ.localize(datetime.combine(end, time.max))
    return (
        lower.astimezone(pytz.utc).replace(tzinfo=None),
        upper.astimezone(pytz.utc).replace(tzinfo=None),
    )

def local_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.utcnow()
    return to_local(now).date()

def month_bounds(month: str) -> Tuple[date, date]:
    """'2026-10' -> (2026-10-01, 2026-10-31)"""
    first = datetime.strptime(month, "%Y-%m").date()
    next_month = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return first, next_month - timedelta(days=1)

def room_sort_key(room: Dict) -> Tuple:
    """Floor, then room number in numeric order ("201" before "1001")"""
    number = str(room.get("room_number", ""))
    digits = re.match(r"\d+", number)
    return (
        room.get("floor", 0),
        int(digits.group()) if digits else float("inf"),
        number,
    )

def serialize_doc(doc: Dict) -> Dict:
    """Convert MongoDB document to JSON-serializable format"""
    if doc is None:
        return None

    if "_id" in doc and isinstance(doc["_id"], ObjectId):
        doc["_id"] = str(doc["_id"])

    # Convert any nested ObjectIds or datetimes
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            doc[key] = str(value)
        elif isinstance(value, datetime):
            doc[key] = to_local(value).isoformat()
        elif isinstance(value, list):
            doc[key] = [serialize_doc(item) if isinstance(item, dict) else item for item in value]
        elif isinstance(value, dict):
            doc[key] = serialize_doc(value)

    return doc

def serialize_docs(docs: List[Dict]) -> List[Dict]:
    """Convert list of MongoDB documents to JSON-serializable format"""
    return [serialize_doc(doc) for doc in docs]
