from typing import List
from urllib.parse import urljoin, urlparse

from app.platform.utils.html import parse_html
from app.platform.utils.url_validator import is_same_origin, strip_fragment

NON_PAGE_EXTENSIONS = (
    '.jpg', '.jpeg', '.png', '.gif', '.svg', '.webp',  # Images
    '.pdf', '.doc', '.docx', '.xls', '.xlsx',  # Documents
    '.zip', '.tar', '.gz',  # Archives
    '.mp3', '.mp4', '.avi', '.mov',  # Media
    '.css', '.js', '.json', '.xml',  # Assets
)

SKIPPED_SCHEMES = ('mailto:', 'tel:', 'javascript:')


def is_non_page_resource(url: str) -> bool:
    """True when the URL path ends with a non-page extension (query string ignored)."""
    return urlparse(url).path.lower().endswith(NON_PAGE_EXTENSIONS)


def extract_links(html: str, current_url: str, base_origin: str) -> List[str]:
    """
    Extract internal page links from an HTML document.

    Args:
        html: Raw HTML of the current page
        current_url: URL the HTML was fetched from (base for relative hrefs)
        base_origin: Origin of the crawl seed, as returned by origin_of()

    Returns:
        Absolute, fragment-free, same-origin page URLs in document order
    """
    links = []
    seen = set()
    document = parse_html(html)

    for anchor in document.select('a[href]'):
        href = anchor.get('href')
        if not href:
            continue

        href = href.replace('"', '').replace("'", '').strip()

        if not href or href == '#' or href.startswith(SKIPPED_SCHEMES):
            continue

        try:
            absolute_url = urljoin(current_url, href)
            if not is_same_origin(absolute_url, base_origin):
                continue
            normalized_url = strip_fragment(absolute_url)
        except ValueError:
            # Malformed URL, skip
            continue

        if is_non_page_resource(normalized_url):
            continue

        if normalized_url not in seen:
            seen.add(normalized_url)
            links.append(normalized_url)

    return links
