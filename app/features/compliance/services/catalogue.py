import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from app.features.compliance.schemas.rule import ManualCheckItem, Rule, RuleCatalogueOut, RuleType
from app.features.compliance.services.checks import Check, CheckRegistry
from app.features.compliance.services.dga_checks import dga_checks
from app.platform.config import settings
from app.platform.exceptions import RuleCatalogueError
from app.platform.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATALOGUE_PATH = Path(__file__).parent.parent / "data" / "dga_rules.json"


class RuleCatalogue:
    """
    The ordered rule list joined with its registered checks.

    Evaluation follows catalogue order, so reports are stable across runs.
    """

    def __init__(self, name: str, version: str, rules: List[Rule], registry: CheckRegistry):
        self.name = name
        self.version = version
        self.rules = rules
        self._registry = registry

    @property
    def automated(self) -> List[Rule]:
        return [rule for rule in self.rules if rule.type == RuleType.automated]

    @property
    def manual(self) -> List[Rule]:
        return [rule for rule in self.rules if rule.type == RuleType.manual]

    def check_for(self, rule: Rule) -> Optional[Check]:
        return self._registry.get(rule.id)

    def manual_checklist(self) -> List[ManualCheckItem]:
        return [
            ManualCheckItem(
                id=rule.id,
                category=rule.category,
                description=rule.description,
                requirements=list(rule.requirements),
                severity=rule.severity,
            )
            for rule in self.manual
        ]

    def to_schema(self) -> RuleCatalogueOut:
        return RuleCatalogueOut(
            name=self.name,
            version=self.version,
            total_rules=len(self.rules),
            automated_count=len(self.automated),
            manual_count=len(self.manual),
            rules=self.rules,
        )


def load_catalogue(
    path: Optional[Union[str, Path]] = None,
    registry: CheckRegistry = dga_checks,
) -> RuleCatalogue:
    """
    Load a rule catalogue from JSON and bind it to the registered checks.

    Raises:
        RuleCatalogueError: unreadable file, malformed rule, duplicate id, or an
            automated rule with no registered check
    """
    path = Path(path or settings.RULES_CATALOGUE_PATH or DEFAULT_CATALOGUE_PATH)

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RuleCatalogueError(f"Cannot read rule catalogue {path}: {e}") from e

    try:
        rules = [Rule(**entry) for entry in raw.get("rules", [])]
    except (ValidationError, TypeError) as e:
        raise RuleCatalogueError(f"Malformed rule in {path}: {e}") from e

    seen: Dict[str, Rule] = {}
    for rule in rules:
        if rule.id in seen:
            raise RuleCatalogueError(f"Duplicate rule id {rule.id} in {path}")
        seen[rule.id] = rule

    missing = [rule.id for rule in rules if rule.type == RuleType.automated and rule.id not in registry]
    if missing:
        raise RuleCatalogueError(f"Automated rules without a check: {', '.join(missing)}")

    for rule_id in registry:
        rule = seen.get(rule_id)
        if rule is None or rule.type != RuleType.automated:
            logger.warning(f"Check registered for rule {rule_id} is not used by an automated rule")

    catalogue = RuleCatalogue(
        name=raw.get("name", "DGA Design System Compliance Rules"),
        version=str(raw.get("version", "1.0")),
        rules=rules,
        registry=registry,
    )
    logger.info(
        f"Loaded {len(rules)} rules from {path.name} "
        f"({len(catalogue.automated)} automated, {len(catalogue.manual)} manual)"
    )
    return catalogue


@lru_cache()
def get_catalogue() -> RuleCatalogue:
    return load_catalogue()
