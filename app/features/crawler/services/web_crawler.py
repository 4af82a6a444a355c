from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Set, Tuple

from app.features.crawler.schemas.crawl import CrawlProgress
from app.features.crawler.services.page_fetcher import PageFetcher
from app.features.crawler.utils.link_extractor import extract_links
from app.platform.config import settings
from app.platform.exceptions import FetchError
from app.platform.logger import get_logger
from app.platform.utils.url_validator import origin_of, strip_fragment

logger = get_logger(__name__)

CrawlProgressCallback = Callable[[CrawlProgress], None]


@dataclass
class CrawlState:
    """Bookkeeping for one crawl; discarded when the crawl returns."""
    discovered: Set[str] = field(default_factory=set)
    visited: Set[str] = field(default_factory=set)
    frontier: Deque[Tuple[str, int]] = field(default_factory=deque)
    # insertion order of `discovered`, returned to the caller
    order: List[str] = field(default_factory=list)

    def discover(self, url: str, depth: int) -> None:
        self.discovered.add(url)
        self.order.append(url)
        self.frontier.append((url, depth))


class WebCrawler:

    def __init__(self, fetcher: Optional[PageFetcher] = None):
        self.fetcher = fetcher or PageFetcher()

    async def discover(
        self,
        seed_url: str,
        max_pages: int = settings.CRAWL_MAX_PAGES,
        max_depth: int = settings.CRAWL_MAX_DEPTH,
        on_progress: Optional[CrawlProgressCallback] = None,
    ) -> List[str]:
        """
        Discover same-origin pages breadth-first from a seed URL.

        Args:
            seed_url: Page to start from; always part of the result
            max_pages: Upper bound on the number of discovered URLs
            max_depth: Pages deeper than this (seed is depth 0) are never fetched
            on_progress: Optional synchronous callback receiving CrawlProgress

        Returns:
            Discovered URLs in discovery order
        """
        base_origin = origin_of(seed_url)
        if base_origin is None:
            raise ValueError(f"Invalid seed URL: {seed_url}")
        seed_url = strip_fragment(seed_url)

        state = CrawlState()
        state.discover(seed_url, 0)

        while state.frontier and len(state.discovered) < max_pages:
            url, depth = state.frontier.popleft()

            if url in state.visited or depth > max_depth:
                continue

            state.visited.add(url)
            self._emit(on_progress, state, current_url=url)

            try:
                page = await self.fetcher.fetch(url)
            except FetchError as e:
                logger.warning(f"Skipping {url}: {e.message}")
                continue

            for link in extract_links(page.text, url, base_origin):
                if len(state.discovered) >= max_pages:
                    break
                if link not in state.discovered:
                    state.discover(link, depth + 1)

        self._emit(on_progress, state, completed=True)
        logger.info(
            f"Discovered {len(state.discovered)} pages from {seed_url} "
            f"({len(state.visited)} visited)"
        )
        return list(state.order)

    @staticmethod
    def _emit(
        on_progress: Optional[CrawlProgressCallback],
        state: CrawlState,
        current_url: Optional[str] = None,
        completed: bool = False,
    ) -> None:
        if on_progress is None:
            return
        on_progress(CrawlProgress(
            discovered=len(state.discovered),
            visited=len(state.visited),
            current_url=current_url,
            completed=completed,
        ))
