from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.features.compliance.schemas.rule import RuleType, Severity
from app.platform.config import settings


class ComplianceStatus(str, Enum):
    COMPLIANT = "Compliant"
    PARTIALLY_COMPLIANT = "Partially Compliant"
    NON_COMPLIANT = "Non-Compliant"


class PassedCheck(BaseModel):
    rule_id: str
    description: str
    severity: Severity
    category: str
    type: RuleType
    page_url: Optional[str] = None


class Violation(BaseModel):
    rule_id: str
    description: str
    severity: Severity
    category: str
    type: RuleType
    requirements: List[str] = []
    page_url: Optional[str] = None
    preview: str = ""
    reason: Optional[str] = None
    fix: Optional[str] = None


class DedupedViolation(Violation):
    affected_pages: List[str] = []
    occurrences: int = 1


class PageReport(BaseModel):
    score: int = Field(ge=0, le=100)
    violations: List[Violation] = []
    passed: List[PassedCheck] = []
    total_checks: int = 0
    page_url: Optional[str] = None
    error: Optional[str] = None


class PageSummary(BaseModel):
    url: str
    score: int
    violation_count: int = 0
    passed_count: int = 0
    error: Optional[str] = None


class AggregateReport(BaseModel):
    score: int = Field(ge=0, le=100)
    status: ComplianceStatus
    violations: List[DedupedViolation] = []
    passed: List[PassedCheck] = []
    total_checks: int = 0
    page_results: List[PageSummary] = []
    total_pages: int = 0
    pages_with_violations: int = 0
    total_violations_before_dedup: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None


class ScanProgress(BaseModel):
    scanned: int
    total: int
    current_url: Optional[str] = None
    completed: bool = False


# ── Requests ─────────────────────────────────────

class ScanRequest(BaseModel):
    url: str


class FullScanRequest(BaseModel):
    url: str
    max_pages: int = Field(default=settings.CRAWL_MAX_PAGES, ge=1, le=500)
    max_depth: int = Field(default=settings.CRAWL_MAX_DEPTH, ge=0, le=10)
