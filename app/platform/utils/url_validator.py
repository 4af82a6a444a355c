from typing import Optional, Tuple
from urllib.parse import urlparse, urlunparse

DEFAULT_PORTS = {"http": 80, "https": 443}
LOCAL_HOSTNAMES = {"localhost", "127.0.0.1"}


def normalize_url(url: str) -> Tuple[str, bool]:

    url = url.strip()

    parsed = urlparse(url)

    if not parsed.scheme:
        normalized = f"https://{url}"
        return normalized, True

    return url, False


def validate_url(url: str) -> Tuple[bool, str, str]:
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    normalized_url, was_modified = normalize_url(url)

    try:
        parsed = urlparse(normalized_url)

        if not parsed.netloc:
            return False, normalized_url, "Invalid URL format: missing domain"

        if parsed.scheme not in ['http', 'https']:
            return False, normalized_url, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

        return True, normalized_url, ""

    except Exception as e:
        return False, normalized_url, f"URL parsing error: {str(e)}"


def origin_of(url: str) -> Optional[str]:
    """
    Return "scheme://host:port" for an absolute http(s) URL, or None.

    Default ports are made explicit so "https://a.example" and
    "https://a.example:443" share one origin.
    """
    try:
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()
        host = parsed.hostname
        if scheme not in DEFAULT_PORTS or not host:
            return None
        port = parsed.port or DEFAULT_PORTS[scheme]
    except ValueError:
        return None
    return f"{scheme}://{host}:{port}"


def is_same_origin(url: str, base_origin: str) -> bool:
    origin = origin_of(url)
    return origin is not None and origin == base_origin


def is_localhost(url: str) -> bool:
    try:
        return (urlparse(url).hostname or "") in LOCAL_HOSTNAMES
    except ValueError:
        return False


def strip_fragment(url: str) -> str:
    """Drop the #fragment and give an empty path the root "/"."""
    parsed = urlparse(url)
    path = parsed.path or "/"
    return urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, "")
    )
