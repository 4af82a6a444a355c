from typing import Union

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.compliance.schemas.report import AggregateReport, FullScanRequest, PageReport, ScanRequest
from app.features.compliance.services.catalogue import get_catalogue
from app.features.compliance.services.report_renderer import HTML_REPORT_FILENAME, render_html_report
from app.features.compliance.services.scanner import ComplianceScanner
from app.features.scans.services.scan_history import ScanHistoryService
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.logger import get_logger
from app.platform.response import api_response
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)

router = APIRouter(prefix="/compliance", tags=["compliance"])


def get_scanner() -> ComplianceScanner:
    return ComplianceScanner()


def require_valid_url(raw_url: str) -> str:
    is_valid, url, error = validate_url(raw_url)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    return url


async def persist_scan(db: AsyncSession, url: str, report: Union[PageReport, AggregateReport]) -> None:
    """Store a scan summary. Storage problems never fail the scan itself."""
    if not settings.PERSIST_SCANS or report.error:
        return
    try:
        await ScanHistoryService(db).save_scan(url, report)
    except SQLAlchemyError as e:
        logger.error(f"Could not save scan for {url}: {e}")
        await db.rollback()


@router.get("/rules")
async def list_rules():
    """Full rule catalogue metadata."""
    catalogue = get_catalogue()
    return api_response(
        data=catalogue.to_schema(),
        message=f"{len(catalogue.rules)} rules loaded",
    )


@router.get("/checklist")
async def manual_checklist():
    """Rules that need a human reviewer; they never affect the score."""
    items = get_catalogue().manual_checklist()
    return api_response(data=items, message=f"{len(items)} manual checks")


@router.post("/scan")
async def scan_page(
    data: ScanRequest,
    scanner: ComplianceScanner = Depends(get_scanner),
    db: AsyncSession = Depends(get_db),
):
    url = require_valid_url(data.url)
    logger.info(f"Single-page scan requested for {url}")

    report = await scanner.scan_url(url)
    await persist_scan(db, url, report)

    if report.error:
        return api_response(data=report, message=f"Scan failed: {report.error}")
    return api_response(data=report, message=f"Scan completed with score {report.score}")


@router.post("/scan/full")
async def scan_site(
    data: FullScanRequest,
    scanner: ComplianceScanner = Depends(get_scanner),
    db: AsyncSession = Depends(get_db),
):
    url = require_valid_url(data.url)
    logger.info(f"Full-site scan requested for {url} (max_pages={data.max_pages}, max_depth={data.max_depth})")

    report = await scanner.scan_site(url, max_pages=data.max_pages, max_depth=data.max_depth)
    await persist_scan(db, url, report)

    if report.error:
        return api_response(data=report, message=f"Scan failed: {report.error}")
    return api_response(
        data=report,
        message=f"Scanned {report.total_pages} pages: {report.status.value} ({report.score}/100)",
    )


@router.post("/report/html", response_class=HTMLResponse)
async def download_html_report(report: AggregateReport):
    """Render a report returned by /scan/full as a standalone HTML download."""
    html = render_html_report(report, manual_checks=get_catalogue().manual_checklist())
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'attachment; filename="{HTML_REPORT_FILENAME}"'},
    )
