"""
Test configuration and fixtures for the DGA Compliance Scanner API.

The database points at a throwaway SQLite file before the app is imported, and
remote websites are faked with httpx.MockTransport so no test touches the network.
"""

import os
import tempfile
from typing import Callable, Dict, Generator, List, Tuple, Union

from dotenv import load_dotenv

import httpx
import pytest
from fastapi.testclient import TestClient

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["PROXY_BASE_URL"] = ""
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "dga_compliance_test_logs")

# url -> html body, or (status_code, body)
SitePages = Dict[str, Union[str, Tuple[int, str]]]


def make_site_transport(pages: SitePages, requested: List[str] = None) -> httpx.MockTransport:
    """Serve `pages` by exact URL; anything else is a 404. Requested URLs are appended to `requested`."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if requested is not None:
            requested.append(url)
        page = pages.get(url)
        if page is None:
            return httpx.Response(404, text="Not found")
        if isinstance(page, tuple):
            status_code, body = page
            return httpx.Response(status_code, html=body)
        return httpx.Response(200, html=page)

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_site() -> Callable[..., httpx.AsyncClient]:
    """Factory returning an AsyncClient that serves the given pages."""

    def build(pages: SitePages, requested: List[str] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=make_site_transport(pages, requested))

    return build


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Entering the client runs the lifespan hook, so tables exist.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def site_client(test_app, client, fake_site):
    """
    Client whose scanner fetches from a fake site.

    Usage: site_client({"https://a.example/": "<html>...</html>"}) returns the TestClient.
    """
    from app.features.compliance.routes.compliance import get_scanner
    from app.features.compliance.services.scanner import ComplianceScanner
    from app.features.crawler.services.page_fetcher import PageFetcher

    def configure(pages: SitePages) -> TestClient:
        fetcher = PageFetcher(client=fake_site(pages))
        test_app.dependency_overrides[get_scanner] = lambda: ComplianceScanner(fetcher=fetcher)
        return client

    yield configure

    test_app.dependency_overrides.pop(get_scanner, None)
