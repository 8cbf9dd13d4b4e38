from fastapi import APIRouter, Depends, HTTPException, Query

from frontdesk.services.revenue_reports import monthly_report
from frontdesk.utils.auth import get_current_user

router = APIRouter(prefix="/reports", tags=["Reports"])

@router.get("/monthly")
async def get_monthly_report(
    month: str = Query(..., description="Month as YYYY-MM"),
    current_user: dict = Depends(get_current_user)
):
    """Revenue for one month by day, room type, floor and AC usage"""
    try:
        return await monthly_report(month)
    except ValueError:
        raise HTTPException(status_code=400, detail="month must be formatted as YYYY-MM")
