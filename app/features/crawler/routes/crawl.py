from fastapi import APIRouter, Depends, HTTPException, status

from app.features.crawler.schemas.crawl import CrawlRequest, CrawlResponse
from app.features.crawler.services.web_crawler import WebCrawler
from app.platform.logger import get_logger
from app.platform.response import api_response
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)

router = APIRouter(prefix="/crawler", tags=["crawler"])


def get_crawler() -> WebCrawler:
    return WebCrawler()


@router.post("/discover")
async def discover_pages(data: CrawlRequest, crawler: WebCrawler = Depends(get_crawler)):
    """Crawl a website and return the same-origin pages it links to."""
    is_valid, url, error = validate_url(data.url)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    logger.info(f"Discovering pages for {url} (max_pages={data.max_pages}, max_depth={data.max_depth})")

    pages = await crawler.discover(url, max_pages=data.max_pages, max_depth=data.max_depth)

    response_data = CrawlResponse(base_url=url, pages=pages, total=len(pages))
    return api_response(data=response_data, message=f"Discovered {len(pages)} pages")
