from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scans.schemas.scan_record import ScanDetailOut, ScanSummaryOut
from app.features.scans.services.scan_history import ScanHistoryService
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/scans", tags=["scans"])


@router.get("", summary="List stored scans, newest first")
async def list_scans(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    url: Optional[str] = Query(None, description="Only scans of this URL"),
    db: AsyncSession = Depends(get_db),
):
    records = await ScanHistoryService(db).list_scans(limit=limit, offset=offset, url=url)
    return api_response(
        data=[
            ScanSummaryOut.model_validate(record).model_dump(mode="json")
            for record in records
        ],
        message=f"Found {len(records)} scans",
    )


@router.get("/{scan_id}", summary="Get a stored scan with its full report")
async def get_scan(scan_id: str, db: AsyncSession = Depends(get_db)):
    record = await ScanHistoryService(db).get_scan(scan_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Scan {scan_id} not found")

    return api_response(
        data=ScanDetailOut.model_validate(record).model_dump(mode="json"),
        message="Scan retrieved",
    )
