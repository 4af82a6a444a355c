from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class RuleType(str, Enum):
    automated = "automated"
    manual = "manual"


class Rule(BaseModel):
    """Catalogue metadata for one rule. The executable check is registered separately by id."""
    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    description: str
    requirements: List[str] = []
    severity: Severity = Severity.medium
    type: RuleType


class ManualCheckItem(BaseModel):
    id: str
    category: str
    description: str
    requirements: List[str]
    severity: Severity


class RuleCatalogueOut(BaseModel):
    name: str
    version: str
    total_rules: int
    automated_count: int
    manual_count: int
    rules: List[Rule]
