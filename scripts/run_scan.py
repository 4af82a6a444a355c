#!/usr/bin/env python3
"""
DGA compliance scan from the command line

Usage:
    python scripts/run_scan.py URL [--single] [--max-pages N] [--max-depth D]
                               [--format json|html] [--output FILE]

Example:
    python scripts/run_scan.py https://www.my.gov.sa --max-pages 20 --format html
"""

import argparse
import asyncio
import sys
from pathlib import Path

from app.features.compliance.schemas.report import AggregateReport
from app.features.compliance.services.catalogue import get_catalogue
from app.features.compliance.services.report_renderer import (
    HTML_REPORT_FILENAME,
    JSON_REPORT_FILENAME,
    render_html_report,
    render_json_report,
)
from app.features.compliance.services.scanner import ComplianceScanner
from app.platform.config import settings
from app.platform.utils.url_validator import validate_url


def print_progress(progress) -> None:
    if getattr(progress, "completed", False):
        return
    if hasattr(progress, "visited"):
        print(f"   crawl: {progress.visited} visited, {progress.discovered} found  {progress.current_url}")
    else:
        print(f"   scan:  {progress.scanned + 1}/{progress.total}  {progress.current_url}")


async def run(args) -> AggregateReport:
    scanner = ComplianceScanner()

    if args.single:
        report = await scanner.scan_multiple_urls([args.url])
        page = report.page_results[0]
        return ComplianceScanner.error_report(page.error) if page.error else report

    return await scanner.scan_site(
        args.url,
        max_pages=args.max_pages,
        max_depth=args.max_depth,
        on_crawl_progress=print_progress,
        on_scan_progress=print_progress,
    )


def main():
    parser = argparse.ArgumentParser(description="Scan a website against the DGA Design System rules")
    parser.add_argument("url", type=str, help="Page or site to scan")
    parser.add_argument("--single", action="store_true", help="Scan only this page, no crawling")
    parser.add_argument("--max-pages", type=int, default=settings.CRAWL_MAX_PAGES, help="Crawl page budget")
    parser.add_argument("--max-depth", type=int, default=settings.CRAWL_MAX_DEPTH, help="Crawl depth")
    parser.add_argument("--format", choices=["json", "html"], default="json", help="Report format")
    parser.add_argument("--output", type=str, help="Output file (defaults to dga_compliance_report.<format>)")

    args = parser.parse_args()

    is_valid, url, error = validate_url(args.url)
    if not is_valid:
        print(f"❌ Error: {error}")
        sys.exit(1)
    args.url = url

    print(f"🔎 Scanning {url}")
    report = asyncio.run(run(args))

    if args.format == "html":
        content = render_html_report(report, manual_checks=get_catalogue().manual_checklist(), site_url=url)
        output = Path(args.output or HTML_REPORT_FILENAME)
    else:
        content = render_json_report(report)
        output = Path(args.output or JSON_REPORT_FILENAME)

    output.write_text(content, encoding="utf-8")

    if report.error:
        print(f"❌ Scan failed: {report.error}")
    else:
        print(f"✅ {report.status.value}: {report.score}/100 "
              f"({len(report.violations)} unique violations across {report.total_pages} pages)")
    print(f"📄 Report written to {output}")

    sys.exit(1 if report.error else 0)


if __name__ == "__main__":
    main()
