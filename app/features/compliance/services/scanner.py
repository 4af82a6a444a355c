from typing import Awaitable, Callable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup

from app.features.compliance.schemas.report import (
    AggregateReport,
    ComplianceStatus,
    PageReport,
    PageSummary,
    PassedCheck,
    ScanProgress,
    Violation,
)
from app.features.compliance.services.rule_engine import RuleEngine, calculate_score
from app.features.compliance.utils.aggregator import deduplicate_violations, derive_status
from app.features.crawler.services.page_fetcher import PageFetcher
from app.features.crawler.services.web_crawler import CrawlProgressCallback, WebCrawler
from app.platform.config import settings
from app.platform.exceptions import FetchError
from app.platform.logger import get_logger

logger = get_logger(__name__)

FetchAndParse = Callable[[str], Awaitable[BeautifulSoup]]
ScanProgressCallback = Callable[[ScanProgress], None]


class ComplianceScanner:
    """
    Runs the rule engine over fetched pages.

    Pages are processed one at a time in input order. Fetch failures never
    abort a scan: they degrade to zero-scored results carrying an error.
    """

    def __init__(self, fetcher: Optional[PageFetcher] = None, engine: Optional[RuleEngine] = None):
        self.fetcher = fetcher or PageFetcher()
        self.engine = engine or RuleEngine()

    def scan_document(self, document: Union[BeautifulSoup, str], page_url: Optional[str] = None) -> PageReport:
        return self.engine.evaluate(document, page_url)

    async def fetch_and_parse(self, url: str) -> BeautifulSoup:
        return await self.fetcher.fetch_document(url)

    async def scan_url(self, url: str) -> PageReport:
        """Fetch and evaluate one page. Never raises for fetch failures."""
        try:
            document = await self.fetch_and_parse(url)
        except FetchError as e:
            logger.warning(f"Scan of {url} failed: {e.message}")
            return PageReport(score=0, page_url=url, error=str(e))
        return self.scan_document(document, url)

    async def scan_multiple_urls(
        self,
        urls: Sequence[str],
        fetch_and_parse: Optional[FetchAndParse] = None,
        on_progress: Optional[ScanProgressCallback] = None,
    ) -> AggregateReport:
        """
        Evaluate each URL in order and aggregate the results.

        Args:
            urls: Pages to scan
            fetch_and_parse: Coroutine turning a URL into a parsed document;
                defaults to fetching through this scanner's PageFetcher
            on_progress: Optional synchronous callback receiving ScanProgress

        Returns:
            AggregateReport with violations deduplicated across pages
        """
        fetch_and_parse = fetch_and_parse or self.fetch_and_parse
        total = len(urls)

        all_violations: List[Violation] = []
        all_passed: List[PassedCheck] = []
        page_results: List[PageSummary] = []

        for scanned, url in enumerate(urls):
            if on_progress is not None:
                on_progress(ScanProgress(scanned=scanned, total=total, current_url=url))

            try:
                document = await fetch_and_parse(url)
            except Exception as e:
                logger.warning(f"Error scanning {url}: {e}")
                page_results.append(PageSummary(url=url, score=0, error=str(e)))
                continue

            report = self.scan_document(document, url)
            all_violations.extend(report.violations)
            all_passed.extend(report.passed)
            page_results.append(PageSummary(
                url=url,
                score=report.score,
                violation_count=len(report.violations),
                passed_count=len(report.passed),
            ))

        if on_progress is not None:
            on_progress(ScanProgress(scanned=total, total=total, completed=True))

        aggregate = AggregateReport(
            score=calculate_score(len(all_passed), len(all_violations)),
            status=derive_status(len(all_violations), len(all_passed)),
            violations=deduplicate_violations(all_violations),
            passed=all_passed,
            total_checks=len(all_passed) + len(all_violations),
            page_results=page_results,
            total_pages=total,
            pages_with_violations=sum(1 for page in page_results if page.violation_count > 0),
            total_violations_before_dedup=len(all_violations),
        )
        logger.info(
            f"Scanned {total} pages: score {aggregate.score}, {aggregate.status.value}, "
            f"{len(aggregate.violations)} unique violations"
        )
        return aggregate

    async def scan_site(
        self,
        url: str,
        max_pages: int = settings.CRAWL_MAX_PAGES,
        max_depth: int = settings.CRAWL_MAX_DEPTH,
        on_crawl_progress: Optional[CrawlProgressCallback] = None,
        on_scan_progress: Optional[ScanProgressCallback] = None,
    ) -> AggregateReport:
        """
        Crawl from `url`, then scan every discovered page.

        An unusable seed or a site where no page could be fetched yields an
        error-shaped report (score 0, Non-Compliant) instead of raising.
        """
        crawler = WebCrawler(fetcher=self.fetcher)
        try:
            urls = await crawler.discover(url, max_pages, max_depth, on_crawl_progress)
        except ValueError as e:
            return self.error_report(str(e))

        report = await self.scan_multiple_urls(urls, on_progress=on_scan_progress)

        if report.page_results and all(page.error for page in report.page_results):
            first_error = report.page_results[0].error
            error_report = self.error_report(first_error)
            error_report.page_results = report.page_results
            error_report.total_pages = report.total_pages
            return error_report

        return report

    @staticmethod
    def error_report(message: str) -> AggregateReport:
        return AggregateReport(score=0, status=ComplianceStatus.NON_COMPLIANT, error=message)
