from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from app.platform.config import settings
from app.platform.exceptions import FetchError
from app.platform.utils.html import parse_html
from app.platform.utils.url_validator import is_localhost


@dataclass
class FetchedPage:
    url: str
    status_code: int
    content_type: str
    text: str


class PageFetcher:
    """
    Fetches raw HTML over HTTP.

    Non-local targets go through the relay at {proxy_base_url}/api/proxy when a
    proxy base URL is configured; everything else is fetched directly.
    Pass `client` to reuse (or mock) an httpx.AsyncClient; otherwise a
    short-lived client is opened per request.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        proxy_base_url: Optional[str] = None,
    ):
        self._client = client
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.proxy_base_url = proxy_base_url if proxy_base_url is not None else settings.PROXY_BASE_URL

    def build_fetch_url(self, url: str) -> str:
        if not self.proxy_base_url or is_localhost(url):
            return url
        return f"{self.proxy_base_url.rstrip('/')}/api/proxy?url={quote(url, safe='')}"

    async def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a page.

        Raises:
            FetchError: on transport errors, timeouts and non-2xx responses
        """
        fetch_url = self.build_fetch_url(url)

        try:
            if self._client is not None:
                response = await self._client.get(fetch_url)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    follow_redirects=True,
                    headers={"User-Agent": settings.FETCH_USER_AGENT},
                ) as client:
                    response = await client.get(fetch_url)
        except httpx.TimeoutException as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise FetchError(url, f"HTTP {response.status_code}", status_code=response.status_code)

        return FetchedPage(
            url=url,
            status_code=response.status_code,
            content_type=response.headers.get("content-type", "text/html"),
            text=response.text,
        )

    async def fetch_document(self, url: str) -> BeautifulSoup:
        page = await self.fetch(url)
        return parse_html(page.text)
