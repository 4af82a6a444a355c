from typing import Dict, Optional

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.element import Tag
from bs4.formatter import HTMLFormatter

HTML_PARSER = "html.parser"


class SourceOrderFormatter(HTMLFormatter):
    """Minimal HTML formatter that keeps attributes in source order."""

    def __init__(self):
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml, indent=None)

    def attributes(self, tag):
        if not tag.attrs:
            return []
        return list(tag.attrs.items())


OUTER_HTML_FORMATTER = SourceOrderFormatter()


def parse_html(html: Optional[str]) -> BeautifulSoup:
    return BeautifulSoup(html or "", HTML_PARSER)


def outer_html(node: Optional[Tag], limit: Optional[int] = None) -> str:
    """Serialized markup of a node, optionally truncated to `limit` characters."""
    if node is None:
        return ""
    markup = node.decode(formatter=OUTER_HTML_FORMATTER)
    return markup[:limit] if limit is not None else markup


def text_content(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return node.get_text()


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse a style="..." attribute into {property: value}.
    Property names are lowercased; values keep their case but are stripped.
    """
    declarations = {}
    for declaration in (style or "").split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip().lower()
        if prop:
            declarations[prop] = value.strip()
    return declarations
