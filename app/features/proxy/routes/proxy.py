from typing import AsyncGenerator, Optional

import httpx
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, Response

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["proxy"])

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


async def get_proxy_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        timeout=settings.FETCH_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": settings.FETCH_USER_AGENT},
    ) as client:
        yield client


@router.get("/proxy")
async def proxy(
    url: Optional[str] = Query(None, description="Target page to relay"),
    client: httpx.AsyncClient = Depends(get_proxy_client),
):
    """
    Fetch `url` server-side and relay status, content type and raw body bytes unchanged.
    Errors use a bare {"error": ...} body rather than the API envelope.
    """
    if not url:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing url parameter"},
            headers=CORS_HEADERS,
        )

    try:
        upstream = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Proxy fetch of {url} failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or e.__class__.__name__},
            headers=CORS_HEADERS,
        )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "text/html"),
        headers=CORS_HEADERS,
    )
