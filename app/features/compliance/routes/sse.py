"""
SSE endpoint streaming a full-site scan as it runs.

Events, in order: `crawl` (one per visited page, then a completed marker),
`scan` (one per scanned page, then a completed marker), and finally
`complete` carrying the AggregateReport, or `error`.
"""
import asyncio
import json
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from app.features.compliance.routes.compliance import get_scanner, persist_scan, require_valid_url
from app.features.compliance.services.scanner import ComplianceScanner
from app.platform.config import settings
from app.platform.db.session import SessionLocal
from app.platform.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/compliance", tags=["compliance"])

_DONE = object()


async def scan_progress_stream(
    scanner: ComplianceScanner,
    url: str,
    max_pages: int,
    max_depth: int,
) -> AsyncGenerator[dict, None]:
    """
    Run scan_site in a background task and relay its progress callbacks.

    Callbacks are synchronous, so they only put events on a queue; this
    generator drains it until the scan task finishes.
    """
    queue: asyncio.Queue = asyncio.Queue()

    def on_crawl(progress):
        queue.put_nowait({"event": "crawl", "data": progress.model_dump_json()})

    def on_scan(progress):
        queue.put_nowait({"event": "scan", "data": progress.model_dump_json()})

    async def run():
        try:
            report = await scanner.scan_site(
                url,
                max_pages=max_pages,
                max_depth=max_depth,
                on_crawl_progress=on_crawl,
                on_scan_progress=on_scan,
            )
            async with SessionLocal() as db:
                await persist_scan(db, url, report)
            queue.put_nowait({"event": "complete", "data": report.model_dump_json()})
        except Exception as e:
            logger.error(f"SSE: scan of {url} failed: {e}", exc_info=True)
            queue.put_nowait({"event": "error", "data": json.dumps({"error": str(e)})})
        finally:
            queue.put_nowait(_DONE)

    task = asyncio.create_task(run())
    logger.info(f"SSE: streaming scan of {url}")

    try:
        while True:
            event = await queue.get()
            if event is _DONE:
                break
            yield event
    finally:
        if not task.done():
            task.cancel()
        logger.info(f"SSE: closed stream for {url}")


@router.get("/scan/stream")
async def stream_scan(
    url: str = Query(..., description="Site to crawl and scan"),
    max_pages: int = Query(settings.CRAWL_MAX_PAGES, ge=1, le=500),
    max_depth: int = Query(settings.CRAWL_MAX_DEPTH, ge=0, le=10),
    scanner: ComplianceScanner = Depends(get_scanner),
):
    target = require_valid_url(url)
    return EventSourceResponse(scan_progress_stream(scanner, target, max_pages, max_depth))
