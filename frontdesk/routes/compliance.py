"""
Police verification records and exports
"""
import io
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from frontdesk.models.compliance import ExportRequest, GuestRecordSummary
from frontdesk.services import compliance_export
from frontdesk.utils.auth import get_current_user

router = APIRouter(prefix="/compliance", tags=["Compliance"])

@router.get("/records", response_model=List[GuestRecordSummary])
async def get_records(
    start_date: date,
    end_date: date,
    current_user: dict = Depends(get_current_user)
):
    """Primary-guest records checked in within the range, with ID image presence"""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")
    records = await compliance_export.records_in_range(start_date, end_date)
    return [compliance_export.summarize(r) for r in records]

@router.post("/export")
async def export_records(
    request: ExportRequest,
    current_user: dict = Depends(get_current_user)
):
    """Download the selected records as a police report, register, CSV or ID archive"""
    try:
        result = await compliance_export.export(request)
    except compliance_export.IncompleteIdentificationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "booking_ids": e.incomplete})
    except compliance_export.NoRecordsSelectedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StreamingResponse(
        io.BytesIO(result.content),
        media_type=result.media_type,
        headers={"Content-Disposition": f"attachment; filename={result.filename}"},
    )
