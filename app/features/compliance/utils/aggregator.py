from typing import Dict, List, Sequence

from app.features.compliance.schemas.report import ComplianceStatus, DedupedViolation, Violation


def violation_key(violation: Violation) -> str:
    return f"{violation.rule_id}-{violation.description}"


def deduplicate_violations(violations: Sequence[Violation]) -> List[DedupedViolation]:
    """
    Collapse violations of the same rule across pages into one entry per
    (rule id, description), keeping first-seen order.

    A page counts once per key: `occurrences` grows only when a new page is
    appended to `affected_pages`.
    """
    deduped: Dict[str, DedupedViolation] = {}

    for violation in violations:
        key = violation_key(violation)
        existing = deduped.get(key)

        if existing is None:
            deduped[key] = DedupedViolation(
                **violation.model_dump(),
                affected_pages=[violation.page_url] if violation.page_url else [],
                occurrences=1,
            )
        elif violation.page_url and violation.page_url not in existing.affected_pages:
            existing.affected_pages.append(violation.page_url)
            existing.occurrences += 1

    return list(deduped.values())


def derive_status(violation_count: int, passed_count: int) -> ComplianceStatus:
    """Status from pre-dedup totals."""
    if violation_count == 0:
        return ComplianceStatus.COMPLIANT
    if violation_count > passed_count:
        return ComplianceStatus.NON_COMPLIANT
    return ComplianceStatus.PARTIALLY_COMPLIANT
