from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.compliance.schemas.report import AggregateReport, PageReport
from app.features.compliance.utils.aggregator import derive_status
from app.features.scans.models.scan_record import ScanRecord, ScanType
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScanHistoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save_scan(self, url: str, report: Union[AggregateReport, PageReport]) -> ScanRecord:
        """
        Store a summary row for a finished scan.

        Single-page reports carry no status of their own; it is derived from
        their counts the same way as for a full scan.
        """
        if isinstance(report, AggregateReport):
            scan_type = ScanType.full
            status = report.status.value
            total_pages = report.total_pages
            violations_count = report.total_violations_before_dedup
        else:
            scan_type = ScanType.single
            status = derive_status(len(report.violations), len(report.passed)).value
            total_pages = 1
            violations_count = len(report.violations)

        record = ScanRecord(
            url=url,
            scan_type=scan_type,
            score=report.score,
            status=status,
            total_pages=total_pages,
            violations_count=violations_count,
            passed_count=len(report.passed),
            scan_data=report.model_dump(mode="json"),
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Saved {scan_type.value} scan {record.id} for {url} (score {record.score})")
        return record

    async def list_scans(self, limit: int = 20, offset: int = 0, url: Optional[str] = None) -> List[ScanRecord]:
        query = select(ScanRecord).order_by(ScanRecord.created_at.desc(), ScanRecord.id.desc())
        if url:
            query = query.where(ScanRecord.url == url)
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def get_scan(self, scan_id: str) -> Optional[ScanRecord]:
        result = await self.db.execute(select(ScanRecord).where(ScanRecord.id == scan_id))
        return result.scalar_one_or_none()
