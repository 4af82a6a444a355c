from app.features.crawler.utils.link_extractor import extract_links, is_non_page_resource
from app.platform.utils.url_validator import origin_of

BASE = "https://a.example/x/"
ORIGIN = origin_of(BASE)


def links_in(body: str, current_url: str = BASE):
    return extract_links(f"<html><body>{body}</body></html>", current_url, ORIGIN)


class TestExtractLinks:

    def test_resolves_relative_links_against_current_page(self):
        links = links_in('<a href="about">About</a><a href="/contact">Contact</a>')
        assert links == ["https://a.example/x/about", "https://a.example/contact"]

    def test_other_origins_are_dropped(self):
        links = links_in(
            '<a href="https://b.example/y">B</a>'
            '<a href="http://a.example/insecure">http</a>'
            '<a href="https://a.example:8443/port">port</a>'
            '<a href="https://sub.a.example/">sub</a>'
            '<a href="https://a.example/ok">ok</a>'
        )
        assert links == ["https://a.example/ok"]

    def test_explicit_default_port_is_same_origin(self):
        assert links_in('<a href="https://a.example:443/p">p</a>') == ["https://a.example:443/p"]

    def test_fragments_collapse_to_one_url(self):
        links = links_in('<a href="https://a.example/p#foo">1</a><a href="https://a.example/p#bar">2</a>')
        assert links == ["https://a.example/p"]

    def test_skips_non_navigational_targets(self):
        links = links_in(
            '<a href="#">top</a>'
            '<a href="mailto:info@a.example">mail</a>'
            '<a href="tel:+966000000">call</a>'
            '<a href="javascript:void(0)">js</a>'
            '<a href="">empty</a>'
        )
        assert links == []

    def test_non_page_extensions_are_dropped(self):
        links = links_in(
            '<a href="/report.pdf">pdf</a>'
            '<a href="/logo.PNG">png</a>'
            '<a href="/bundle.js">js</a>'
            '<a href="/archive.tar.gz">gz</a>'
            '<a href="/services">services</a>'
        )
        assert links == ["https://a.example/services"]

    def test_quotes_and_whitespace_are_stripped(self):
        links = links_in("<a href=\"  '/quoted'  \">q</a>")
        assert links == ["https://a.example/quoted"]

    def test_malformed_urls_are_ignored(self):
        links = links_in('<a href="http://[::1">bad</a><a href="/good">good</a>')
        assert links == ["https://a.example/good"]

    def test_duplicates_keep_first_position(self):
        links = links_in('<a href="/a">1</a><a href="/b">2</a><a href="/a">3</a>')
        assert links == ["https://a.example/a", "https://a.example/b"]


class TestIsNonPageResource:

    def test_query_string_is_ignored(self):
        assert is_non_page_resource("https://a.example/download?file=report.pdf") is False

    def test_path_extension_is_case_insensitive(self):
        assert is_non_page_resource("https://a.example/Brochure.PDF") is True

    def test_plain_page(self):
        assert is_non_page_resource("https://a.example/about") is False
