from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from app.features.scans.models.scan_record import ScanType


class ScanSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    scan_type: ScanType
    score: int
    status: str
    total_pages: int
    violations_count: int
    passed_count: int
    created_at: Optional[datetime] = None


class ScanDetailOut(ScanSummaryOut):
    scan_data: Optional[Dict[str, Any]] = None
