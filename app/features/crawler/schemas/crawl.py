from typing import List, Optional

from pydantic import BaseModel, Field

from app.platform.config import settings


class CrawlRequest(BaseModel):
    url: str
    max_pages: int = Field(default=settings.CRAWL_MAX_PAGES, ge=1, le=500)
    max_depth: int = Field(default=settings.CRAWL_MAX_DEPTH, ge=0, le=10)


class CrawlProgress(BaseModel):
    discovered: int
    visited: int
    current_url: Optional[str] = None
    completed: bool = False


class CrawlResponse(BaseModel):
    base_url: str
    pages: List[str]
    total: int
