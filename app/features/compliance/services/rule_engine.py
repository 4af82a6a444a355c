import math
from typing import List, Optional, Union

from bs4 import BeautifulSoup

from app.features.compliance.schemas.report import PageReport, PassedCheck, Violation
from app.features.compliance.schemas.rule import Rule, RuleType
from app.features.compliance.services.catalogue import RuleCatalogue, get_catalogue
from app.features.compliance.services.checks import CheckResult, ElementCheck, GlobalCheck, as_result
from app.features.compliance.utils.page_context import PageContext
from app.platform.config import settings
from app.platform.logger import get_logger
from app.platform.utils.html import outer_html, parse_html

logger = get_logger(__name__)

MISSING_STRUCTURE_PREVIEW = "Document Structure Missing"


def calculate_score(passed_count: int, violation_count: int) -> int:
    """
    Percentage of checks passed, rounded half-up. A page with no checks scores 100.
    """
    total = passed_count + violation_count
    if total == 0:
        return 100
    return int(math.floor(100 * passed_count / total + 0.5))


class RuleEngine:
    """Evaluates every automated rule of a catalogue against one parsed page."""

    def __init__(self, catalogue: Optional[RuleCatalogue] = None, preview_max_length: Optional[int] = None):
        self.catalogue = catalogue or get_catalogue()
        self.preview_max_length = (
            preview_max_length if preview_max_length is not None else settings.PREVIEW_MAX_LENGTH
        )

    def evaluate(self, document: Union[BeautifulSoup, str], page_url: Optional[str] = None) -> PageReport:
        if isinstance(document, str):
            document = parse_html(document)
        context = PageContext(document=document, page_url=page_url)

        violations: List[Violation] = []
        passed: List[PassedCheck] = []

        for rule in self.catalogue.rules:
            if rule.type == RuleType.manual:
                continue

            result, preview = self._run_check(rule, context)
            if result.passed:
                passed.append(PassedCheck(
                    rule_id=rule.id,
                    description=rule.description,
                    severity=rule.severity,
                    category=rule.category,
                    type=rule.type,
                    page_url=page_url,
                ))
            else:
                violations.append(Violation(
                    rule_id=rule.id,
                    description=rule.description,
                    severity=rule.severity,
                    category=rule.category,
                    type=rule.type,
                    requirements=list(rule.requirements),
                    page_url=page_url,
                    preview=preview,
                    reason=result.reason,
                    fix=result.fix,
                ))

        return PageReport(
            score=calculate_score(len(passed), len(violations)),
            violations=violations,
            passed=passed,
            total_checks=len(passed) + len(violations),
            page_url=page_url,
        )

    def _run_check(self, rule: Rule, context: PageContext):
        """Returns (CheckResult, preview). The preview is only meaningful on failure."""
        check = self.catalogue.check_for(rule)

        if isinstance(check, GlobalCheck):
            try:
                result = as_result(check.func(context))
            except Exception as e:
                logger.error(f"Check for rule {rule.id} raised on {context.page_url}: {e}", exc_info=True)
                result = CheckResult(passed=False, reason=f"Check raised an error: {e}")
            return result, ("" if result.passed else self._global_preview(context))

        if isinstance(check, ElementCheck):
            return self._run_element_check(rule, check, context)

        # Unreachable for catalogues built by load_catalogue
        logger.error(f"No check registered for automated rule {rule.id}")
        return CheckResult(passed=False, reason="No automated check is registered for this rule."), ""

    def _run_element_check(self, rule: Rule, check: ElementCheck, context: PageContext):
        elements = context.select(check.selector)
        if not elements:
            return CheckResult(passed=True), ""

        for element in elements:
            try:
                result = as_result(check.func(element, context))
            except Exception as e:
                logger.error(f"Check for rule {rule.id} raised on {context.page_url}: {e}", exc_info=True)
                result = CheckResult(passed=False, reason=f"Check raised an error: {e}")
            if not result.passed:
                return result, outer_html(element, self.preview_max_length)

        return CheckResult(passed=True), ""

    def _global_preview(self, context: PageContext) -> str:
        root = context.root
        if root is None:
            return MISSING_STRUCTURE_PREVIEW
        return outer_html(root, self.preview_max_length)
