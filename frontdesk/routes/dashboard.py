from fastapi import APIRouter, Depends

from frontdesk.services import dashboard
from frontdesk.utils.auth import get_current_user
from frontdesk.utils.helpers import serialize_doc

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("/stats")
async def get_stats(current_user: dict = Depends(get_current_user)):
    """Room status totals, today's arrivals and collection, occupancy"""
    return await dashboard.dashboard_stats()

@router.get("/departures")
async def get_departures(current_user: dict = Depends(get_current_user)):
    """Overdue and upcoming checkouts"""
    return serialize_doc(await dashboard.departures())
