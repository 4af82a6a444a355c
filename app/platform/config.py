from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "DGA Compliance Scanner"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./dga_compliance.db"
    PERSIST_SCANS: bool = True

    # ── Crawler ─────────────────────────────────
    CRAWL_MAX_PAGES: int = 50
    CRAWL_MAX_DEPTH: int = 3

    # ── Fetching ────────────────────────────────
    FETCH_TIMEOUT_SECONDS: float = 30.0
    FETCH_USER_AGENT: str = "DGAComplianceScanner/1.0"

    # When set, non-local pages are fetched through {PROXY_BASE_URL}/api/proxy
    PROXY_BASE_URL: Optional[str] = None

    # ── Rule engine ─────────────────────────────
    PREVIEW_MAX_LENGTH: int = 1000
    RULES_CATALOGUE_PATH: Optional[str] = None

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
