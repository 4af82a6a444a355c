from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from app.platform.utils.html import text_content


@dataclass
class PageContext:
    """A parsed page and the URL it came from, handed to every rule check."""

    document: BeautifulSoup
    page_url: Optional[str] = None

    @property
    def root(self) -> Optional[Tag]:
        """The <html> element, or the first element for fragments without one."""
        return self.document.find("html") or self.document.find()

    @property
    def body(self) -> Union[Tag, BeautifulSoup]:
        return self.document.body or self.document

    @cached_property
    def body_text(self) -> str:
        return text_content(self.body)

    def select(self, selector: str) -> List[Tag]:
        return self.document.select(selector)

    def exists(self, *selectors: str) -> bool:
        """True if any of the selectors matches at least one element."""
        return any(self.document.select_one(selector) is not None for selector in selectors)
